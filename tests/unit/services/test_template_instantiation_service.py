import copy
import itertools

import pytest

from models import PageTemplate
from services.template_instantiation_service import instantiate, new_block_id


def _all_ids(blocks):
    ids = []
    for block in blocks:
        ids.append(block["id"])
        for item in block.get("props", {}).get("items", []):
            ids.extend(_all_ids(item.get("blocks", [])))
    return ids


@pytest.mark.unit
class TestTemplateInstantiation:

    def setup_method(self):
        self.content = {
            "blocks": [
                {"id": "hero-1", "type": "hero", "props": {"title": "Your name"}},
                {
                    "id": "cols-1",
                    "type": "columns",
                    "props": {"items": [{"title": "About", "blocks": [
                        {"id": "text-1", "type": "text", "props": {"content": "Bio"}},
                    ]}]},
                },
            ],
            "meta": {"theme": "minimal"},
        }
        self.template = PageTemplate(slug="portfolio", name="Portfolio", content_json=copy.deepcopy(self.content))

    def test_without_template_starts_blank(self):
        document = instantiate(None, "My page", "my-page")

        assert document.blocks == []
        assert document.to_json() == {"blocks": []}

    def test_regenerates_every_id(self):
        document = instantiate(self.template, "Ana", "ana")

        ids = _all_ids(document.to_json()["blocks"])
        assert len(ids) == 3
        assert not set(ids) & {"hero-1", "cols-1", "text-1"}
        assert all(block_id.startswith("blk_") for block_id in ids)

    def test_copies_everything_but_ids(self):
        counter = itertools.count(1)

        document = instantiate(self.template, "Ana", "ana", id_factory=lambda: f"n{next(counter)}")

        data = document.to_json()
        assert data["meta"] == {"theme": "minimal"}
        assert [block["id"] for block in data["blocks"]] == ["n1", "n2"]
        assert data["blocks"][1]["props"]["items"][0]["blocks"][0] == {
            "id": "n3", "type": "text", "props": {"content": "Bio"},
        }

    def test_two_instantiations_share_no_ids(self):
        first = _all_ids(instantiate(self.template, "A", "a").to_json()["blocks"])
        second = _all_ids(instantiate(self.template, "B", "b").to_json()["blocks"])

        assert not set(first) & set(second)

    def test_template_is_not_modified(self):
        instantiate(self.template, "Ana", "ana")

        assert self.template.content_json == self.content

    def test_rekeys_blocks_inside_unknown_types(self):
        self.template.content_json = {"blocks": [{
            "id": "wrap",
            "type": "carousel",
            "props": {"slides": [{"id": "inner", "type": "image", "props": {}}]},
        }]}

        data = instantiate(self.template, "Ana", "ana", id_factory=lambda: "fresh").to_json()

        assert data["blocks"][0]["id"] == "fresh"
        assert data["blocks"][0]["props"]["slides"][0]["id"] == "fresh"

    def test_repeater_items_keep_their_keys(self):
        item = {"label": "Site", "url": "https://example.com", "icon": "globe", "id": "item-1", "type": "primary"}
        self.template.content_json = {"blocks": [{"id": "links-1", "type": "links", "props": {"items": [item]}}]}

        data = instantiate(self.template, "Ana", "ana", id_factory=lambda: "fresh").to_json()

        assert data["blocks"][0]["id"] == "fresh"
        assert data["blocks"][0]["props"]["items"] == [item]

    def test_undeclared_props_of_known_types_are_not_rekeyed(self):
        legacy = [{"id": "old", "type": "note"}]
        self.template.content_json = {"blocks": [{"id": "t", "type": "text", "props": {"legacy": legacy}}]}

        data = instantiate(self.template, "Ana", "ana", id_factory=lambda: "fresh").to_json()

        assert data["blocks"][0]["props"]["legacy"] == legacy

    def test_new_block_id_format(self):
        block_id = new_block_id()

        assert block_id.startswith("blk_")
        assert len(block_id) == 36
        assert new_block_id() != block_id
