from models.page_template import PageTemplate, PageTemplateCategory
from models.page import Page
