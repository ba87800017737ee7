"""Slug generation from post titles."""

from django.test import SimpleTestCase

from posts.slugs import FALLBACK_SLUG, base_slug, generate_slug, with_suffix


class GenerateSlugTests(SimpleTestCase):
    def test_folds_diacritics_and_drops_punctuation(self):
        self.assertEqual(generate_slug("Café com Leão!"), "cafe-com-leao")

    def test_collapses_whitespace_and_hyphen_runs(self):
        self.assertEqual(generate_slug("  Hello,   World -- again  "), "hello-world-again")

    def test_no_leading_or_trailing_hyphens(self):
        self.assertEqual(generate_slug("-- Django tips --"), "django-tips")

    def test_only_hyphens_are_trimmed(self):
        self.assertEqual(generate_slug("_init_ notes"), "_init_-notes")
        self.assertEqual(generate_slug("- __dunder__ -"), "__dunder__")

    def test_lowercases(self):
        self.assertEqual(generate_slug("Python 3 Is GREAT"), "python-3-is-great")

    def test_degenerate_titles_give_empty_string(self):
        for title in ("", "!!!", "---", "   ", None):
            with self.subTest(title=title):
                self.assertEqual(generate_slug(title), "")

    def test_idempotent(self):
        slug = generate_slug("Ação e Reação: um estudo")
        self.assertEqual(generate_slug(slug), slug)


class BaseSlugTests(SimpleTestCase):
    def test_falls_back_when_title_has_no_usable_characters(self):
        self.assertEqual(base_slug("???", 255), FALLBACK_SLUG)

    def test_leaves_room_for_a_suffix(self):
        slug = base_slug("word " * 100, 255)
        self.assertLessEqual(len(with_suffix(slug, 1767225600000)), 255)
        self.assertFalse(slug.endswith("-"))

    def test_with_suffix(self):
        self.assertEqual(with_suffix("hello-world", 42), "hello-world-42")
