"""
Unit tests for core Retrospect components.

Tests configuration management, data models, trees and markdown rendering.
"""

import os
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from retrospect.config import ConfigManager
from retrospect.importers.mock import make_block
from retrospect.models import Block, BlockTree, BlockType, ParsedPage, title_from_url
from retrospect.models.canonical import EPOCH, UNKNOWN_PAGE_TITLE
from retrospect.render import build_markdown_from_trees, to_prompt_text


class TestConfigManager(unittest.TestCase):
    """Test configuration management functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "test_config.yaml"

    def tearDown(self):
        """Clean up test fixtures."""
        if self.config_path.exists():
            self.config_path.unlink()
        os.rmdir(self.temp_dir)

    def test_config_creation_with_defaults(self):
        """Test config manager falls back to defaults when file missing."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.page_size, 100)
        self.assertEqual(config.lookback_days, 7)
        self.assertEqual(config.root_search_budget, 30.0)
        self.assertEqual(config.notion_token_env, "NOTION_TOKEN")
        self.assertEqual(config.page_patterns, [])

    def test_config_loading_from_file(self):
        """Test loading configuration from YAML file on top of the defaults."""
        test_config = """
crawl:
  page_size: 50
  root_search_budget_seconds: 5

exclusions:
  page_patterns:
    - "(?i)template"
"""
        with open(self.config_path, 'w') as f:
            f.write(test_config)

        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.page_size, 50)
        self.assertEqual(config.root_search_budget, 5.0)
        self.assertEqual(config.lookback_days, 7)  # untouched default
        self.assertEqual(config.page_patterns, ["(?i)template"])

    def test_dot_notation_access(self):
        """Test accessing config values with dot notation."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.get("notion.api_version"), "2022-06-28")
        self.assertEqual(config.get("paths.prompt_info_file"), "prompt_info.md")
        self.assertEqual(config.get("nonexistent.key", "default"), "default")
        self.assertIn("page_size", config.get_section("crawl"))

    def test_config_reload(self):
        """Test configuration reloading."""
        with open(self.config_path, 'w') as f:
            f.write("crawl:\n  lookback_days: 3")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.lookback_days, 3)

        with open(self.config_path, 'w') as f:
            f.write("crawl:\n  lookback_days: 14")

        config.reload()
        self.assertEqual(config.lookback_days, 14)


class TestPageExclusion(unittest.TestCase):
    """Test the regex-based page exclusion predicate."""

    def make_config(self, *patterns):
        config = ConfigManager("does-not-exist.yaml")
        config._config["exclusions"]["page_patterns"] = list(patterns)
        return config

    def test_default_config_excludes_nothing(self):
        config = self.make_config()
        self.assertFalse(config.should_exclude_page("Test Page", "https://example.com/test"))

    def test_exclude_page_by_title(self):
        config = self.make_config("(?i).*temp.*")

        self.assertTrue(config.should_exclude_page("My temp notes", "https://example.com/notes"))
        self.assertTrue(config.should_exclude_page("Temporary", "https://example.com/notes"))
        self.assertFalse(config.should_exclude_page("My notes", "https://example.com/notes"))

    def test_exclude_page_by_url(self):
        config = self.make_config("https://.*/draft-.*")

        self.assertTrue(config.should_exclude_page("My notes", "https://example.com/draft-123"))
        self.assertFalse(config.should_exclude_page("My notes", "https://example.com/notes"))

    def test_exact_title_match(self):
        config = self.make_config("^My Special Page$")

        self.assertTrue(config.should_exclude_page("My Special Page", "https://example.com/anything"))
        self.assertFalse(config.should_exclude_page("My Special Page 2", "https://example.com/anything"))

    def test_invalid_regex_pattern_is_ignored(self):
        config = self.make_config("[invalid", "secret")

        self.assertFalse(config.should_exclude_page("Test", "https://example.com/test"))
        self.assertTrue(config.should_exclude_page("secret plans", "https://example.com/test"))


class TestDataModels(unittest.TestCase):
    """Test data model validation and functionality."""

    def test_block_identity_is_its_id(self):
        first = Block(id="b-1", page_id="p-1", text="first version")
        second = Block(id="b-1", page_id="p-1", text="second version", has_children=True)
        other = Block(id="b-2", page_id="p-1", text="first version")

        self.assertEqual(first, second)
        self.assertNotEqual(first, other)
        self.assertEqual(len({first, second, other}), 2)

    def test_block_emptiness_ignores_whitespace(self):
        self.assertTrue(Block(id="b", page_id="p", text="").is_empty())
        self.assertTrue(Block(id="b", page_id="p", text="  \n\t ").is_empty())
        self.assertFalse(Block(id="b", page_id="p", text=" x ").is_empty())

    def test_block_from_notion_record(self):
        edited = datetime(2024, 5, 22, 9, 30, tzinfo=timezone.utc)
        raw = make_block("b-1", "Met with Jane", edited, "heading_1", has_children=True, parent_id="b-0")

        block = Block.from_notion_block(raw, "p-1")

        self.assertEqual(block.id, "b-1")
        self.assertEqual(block.page_id, "p-1")
        self.assertEqual(block.block_type, BlockType.HEADING_1)
        self.assertEqual(block.text, "Met with Jane")
        self.assertEqual(block.update_date, edited)
        self.assertTrue(block.has_children)
        self.assertEqual(block.parent.parent_type, "block_id")
        self.assertEqual(block.parent.parent_id, "b-0")

    def test_block_text_joins_spans_with_spaces(self):
        raw = make_block("b-1", "ignored")
        raw["paragraph"]["rich_text"] = [
            {"type": "text", "plain_text": "Hello", "annotations": {"bold": True}},
            {"type": "text", "plain_text": "world", "href": "https://example.com"},
        ]

        block = Block.from_notion_block(raw, "p-1")

        self.assertEqual(block.text, "Hello world")

    def test_unknown_block_type_and_missing_fields(self):
        raw = {"id": "b-9", "type": "ai_block", "ai_block": {}}

        block = Block.from_notion_block(raw, "p-1")

        self.assertEqual(block.block_type, BlockType.UNSUPPORTED)
        self.assertEqual(block.text, "")
        self.assertEqual(block.creation_date, EPOCH)
        self.assertFalse(block.has_children)
        self.assertIsNone(block.parent)

    def test_child_page_uses_title(self):
        raw = {"id": "b-3", "type": "child_page", "child_page": {"title": "Sub page"}}

        block = Block.from_notion_block(raw, "p-1")

        self.assertEqual(block.block_type, BlockType.CHILD_PAGE)
        self.assertEqual(block.text, "Sub page")

    def test_title_from_url(self):
        self.assertEqual(
            title_from_url("https://www.notion.so/August-19-2024-651d530e07a14f9c97b4084614c5049b"),
            "August 19 2024",
        )
        self.assertEqual(title_from_url("https://www.notion.so/Notes-abc123/"), "Notes")
        self.assertEqual(title_from_url("https://www.notion.so"), UNKNOWN_PAGE_TITLE)
        self.assertEqual(title_from_url("https://www.notion.so/651d530e07a14f9c"), "")


class TestBlockTree(unittest.TestCase):
    """Test tree construction and traversal."""

    def test_walk_is_preorder_with_depths(self):
        tree = BlockTree.from_root(Block(id="r", page_id="p", text="root"))
        a = tree.root.add_child(Block(id="a", page_id="p", text="a"))
        a.add_child(Block(id="a1", page_id="p", text="a1"))
        tree.root.add_child(Block(id="b", page_id="p", text="b"))

        walked = [(depth, node.block.id) for depth, node in tree.walk()]

        self.assertEqual(walked, [(0, "r"), (1, "a"), (2, "a1"), (1, "b")])
        self.assertEqual(tree.block_ids(), ["r", "a", "a1", "b"])
        self.assertEqual(len(tree), 4)


class TestMarkdownRendering(unittest.TestCase):
    """Test rendering blocks and trees to markdown."""

    def test_block_to_markdown(self):
        cases = [
            (BlockType.HEADING_1, False, "# Text"),
            (BlockType.HEADING_2, False, "## Text"),
            (BlockType.HEADING_3, False, "### Text"),
            (BlockType.BULLETED_LIST_ITEM, False, "- Text"),
            (BlockType.NUMBERED_LIST_ITEM, False, "1. Text"),
            (BlockType.TO_DO, False, "- [ ] Text"),
            (BlockType.TO_DO, True, "- [x] Text"),
            (BlockType.TOGGLE, False, "> Text"),
            (BlockType.PARAGRAPH, False, "Text"),
            (BlockType.UNSUPPORTED, False, "Text"),
        ]
        for block_type, checked, expected in cases:
            with self.subTest(block_type=block_type, checked=checked):
                block = Block(id="b", page_id="p", block_type=block_type, text="Text", checked=checked)
                self.assertEqual(block.to_markdown(), expected)

    def test_to_prompt_text(self):
        tree = BlockTree.from_root(
            Block(id="r", page_id="p", block_type=BlockType.HEADING_2, text="Meeting")
        )
        tree.root.add_child(
            Block(id="c", page_id="p", block_type=BlockType.BULLETED_LIST_ITEM, text="Jane's birthday")
        )
        other = BlockTree.from_root(Block(id="o", page_id="p", text="Loose note"))

        pages = [
            ParsedPage(page_id="p", title="Journal", page_content=[tree, other]),
            ParsedPage(page_id="q", title="Work", page_content=[
                BlockTree.from_root(Block(id="w", page_id="q", text="Budget"))
            ]),
        ]

        self.assertEqual(
            build_markdown_from_trees([tree, other]),
            "## Meeting\n  - Jane's birthday\nLoose note",
        )
        self.assertEqual(
            to_prompt_text(pages),
            "Page Title: Journal\n## Meeting\n  - Jane's birthday\nLoose note\n\n"
            "Page Title: Work\nBudget",
        )

    def test_to_prompt_text_empty(self):
        self.assertEqual(to_prompt_text([]), "")


if __name__ == '__main__':
    unittest.main()
