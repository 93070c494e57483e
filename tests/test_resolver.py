"""
Tests for reference resolution.
"""
import unittest
import sys
import os

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from exceptions import InvalidReferenceError
from models import KIND_BARE, KIND_PLAYLIST, KIND_VIDEO
from services.resolver import ReferenceResolver, split_references


class TestReferenceResolver(unittest.TestCase):
    """Test cases for ReferenceResolver."""

    def setUp(self):
        self.resolver = ReferenceResolver()

    def assertResolves(self, raw, identifier, kind):
        reference = self.resolver.resolve(raw)
        self.assertEqual(reference.identifier, identifier)
        self.assertEqual(reference.kind, kind)

    def test_playlist_page(self):
        self.assertResolves("https://www.youtube.com/playlist?list=PLabc_123-XYZ",
                            "PLabc_123-XYZ", KIND_PLAYLIST)

    def test_watch_url_with_list_is_playlist(self):
        """A watch link inside a playlist resolves to the playlist."""
        self.assertResolves("https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PLxyz",
                            "PLxyz", KIND_PLAYLIST)

    def test_short_link_with_list_is_playlist(self):
        self.assertResolves("https://youtu.be/dQw4w9WgXcQ?list=PLshort", "PLshort", KIND_PLAYLIST)

    def test_watch_url(self):
        self.assertResolves("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ", KIND_VIDEO)
        self.assertResolves("https://m.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
                            "dQw4w9WgXcQ", KIND_VIDEO)

    def test_short_link(self):
        self.assertResolves("https://youtu.be/dQw4w9WgXcQ?t=42", "dQw4w9WgXcQ", KIND_VIDEO)

    def test_embed_shorts_and_legacy_links(self):
        self.assertResolves("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ", KIND_VIDEO)
        self.assertResolves("https://www.youtube-nocookie.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ", KIND_VIDEO)
        self.assertResolves("https://www.youtube.com/shorts/abcDEF12345", "abcDEF12345", KIND_VIDEO)
        self.assertResolves("https://www.youtube.com/v/dQw4w9WgXcQ", "dQw4w9WgXcQ", KIND_VIDEO)

    def test_bare_identifier(self):
        self.assertResolves("dQw4w9WgXcQ", "dQw4w9WgXcQ", KIND_BARE)
        self.assertResolves("  PLAYLIST_A  ", "PLAYLIST_A", KIND_BARE)

    def test_invalid_reference(self):
        with self.assertRaises(InvalidReferenceError) as ctx:
            self.resolver.resolve("not a valid url!")
        self.assertEqual(ctx.exception.raw, "not a valid url!")

    def test_empty_reference(self):
        with self.assertRaises(InvalidReferenceError):
            self.resolver.resolve("   ")

    def test_classification_is_memoized(self):
        self.resolver.resolve("dQw4w9WgXcQ")
        self.resolver.resolve("dQw4w9WgXcQ")
        info = self.resolver.classify.cache_info()
        self.assertEqual(info.hits, 1)
        self.assertEqual(info.misses, 1)


class TestSplitReferences(unittest.TestCase):
    """Test cases for split_references."""

    def test_split_lines(self):
        text = "https://youtu.be/a1\n\n   PLxyz  \r\nvideo_2\n"
        self.assertEqual(split_references(text), ["https://youtu.be/a1", "PLxyz", "video_2"])

    def test_empty_text(self):
        self.assertEqual(split_references(""), [])
        self.assertEqual(split_references(None), [])


if __name__ == '__main__':
    unittest.main()
