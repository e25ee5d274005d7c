import re

import pytest

from utils.slug import SLUG_PATTERN, slugify


@pytest.mark.unit
class TestSlugify:

    @pytest.mark.parametrize("text, expected", [
        ("Ana Souza", "ana-souza"),
        ("Portfólio Ágil", "portfolio-agil"),
        ("  Hello,   World!  ", "hello-world"),
        ("Product Designer @ 2024", "product-designer-2024"),
        ("already-a-slug", "already-a-slug"),
        ("!!!", ""),
    ])
    def test_slugify(self, text, expected):
        assert slugify(text) == expected

    def test_result_matches_pattern(self):
        assert re.match(SLUG_PATTERN, slugify("São Paulo -- Café"))

    @pytest.mark.parametrize("slug", ["Ana", "ana--souza", "-ana", "ana_souza", ""])
    def test_pattern_rejects(self, slug):
        assert not re.match(SLUG_PATTERN, slug)
