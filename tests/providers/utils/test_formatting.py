import unittest
from smarttalk.providers.utils.formatting import MarkdownNormalizer, clean_markdown_formatting

SAMPLES = [
    "**bold**",
    "`code`",
    "plain text stays",
    "# Heading\n## Sub heading\ntext",
    "Mix of **bold**, *italic*, __under__ and _it_",
    "```python\nprint('hi')\n```",
    "See [the docs](https://example.com/docs) for more",
    "***both***",
    "**a*b**",
    "nested [**bold link**](http://x)",
    "snake_case_name and __init__",
    "####### seven hashes",
    "`` empty ``",
    "",
]


class TestMarkdownNormalizer(unittest.TestCase):
    def test_bold(self):
        self.assertEqual(clean_markdown_formatting("**bold**"), "bold")
        self.assertEqual(clean_markdown_formatting("__bold__"), "bold")

    def test_inline_code(self):
        self.assertEqual(clean_markdown_formatting("`code`"), "code")

    def test_italic(self):
        self.assertEqual(clean_markdown_formatting("an *italic* word"), "an italic word")
        self.assertEqual(clean_markdown_formatting("an _italic_ word"), "an italic word")

    def test_headings(self):
        self.assertEqual(
            clean_markdown_formatting("# Title\n### Section\nBody"),
            "Title\nSection\nBody",
        )

    def test_heading_marker_needs_following_space(self):
        self.assertEqual(clean_markdown_formatting("#hashtag"), "#hashtag")

    def test_fenced_code(self):
        self.assertEqual(
            clean_markdown_formatting("Run:\n```\nls -la\n```"),
            "Run:\n\nls -la\n",
        )

    def test_links_reduced_to_text(self):
        self.assertEqual(
            clean_markdown_formatting("Go to [Example](https://example.com) now"),
            "Go to Example now",
        )

    def test_bold_inside_sentence(self):
        self.assertEqual(clean_markdown_formatting("**Hello** world"), "Hello world")

    def test_empty_values_pass_through(self):
        self.assertEqual(clean_markdown_formatting(""), "")
        self.assertIsNone(clean_markdown_formatting(None))

    def test_idempotent(self):
        for sample in SAMPLES:
            with self.subTest(sample=sample):
                once = MarkdownNormalizer.strip(sample)
                self.assertEqual(MarkdownNormalizer.strip(once), once)

    def test_overlapping_markers_reach_a_fixed_point(self):
        once = clean_markdown_formatting("**a*b**")
        self.assertEqual(once, "ab*")
        self.assertEqual(clean_markdown_formatting(once), once)


if __name__ == "__main__":
    unittest.main()
