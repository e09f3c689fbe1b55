# tests/test_ingestion/test_normalize.py
import unittest

from captionhub.ingestion.errors import DuplicateImageKeyError, EmptyResultError, SkipLog
from captionhub.ingestion.normalize import filename_from_url, normalize
from captionhub.ingestion.records import ImageDraft
from tests.factories import counting_keys


def draft(ref, **overrides):
    fields = dict(
        source_ref=ref,
        filename="",
        primary_url=f"http://x/{ref}.jpg",
        caption=f"caption {ref}",
    )
    fields.update(overrides)
    return ImageDraft(**fields)


class FilenameFromUrlTestCase(unittest.TestCase):
    def test_last_path_segment(self):
        self.assertEqual(filename_from_url("http://x/images/a.jpg"), "a.jpg")

    def test_query_string_is_ignored(self):
        self.assertEqual(filename_from_url("https://cdn.example.com/p/b.png?size=large"), "b.png")

    def test_trailing_slash_is_unknown(self):
        self.assertEqual(filename_from_url("http://x/images/"), "unknown")
        self.assertEqual(filename_from_url("http://x"), "unknown")


class NormalizeTestCase(unittest.TestCase):
    def test_fields_are_trimmed(self):
        drafts = [draft("a", primary_url="  http://x/a.jpg ", caption="  a cat  ",
                        additional_captions=[" one ", "   ", "two"], license="  ")]
        record = list(normalize(drafts, SkipLog(), key_factory=counting_keys()))[0]

        self.assertEqual(record.primary_url, "http://x/a.jpg")
        self.assertEqual(record.caption, "a cat")
        self.assertEqual(record.additional_captions, ["one", "two"])
        self.assertIsNone(record.license)
        self.assertEqual(record.filename, "a.jpg")

    def test_invalid_drafts_are_soft_skipped(self):
        drafts = [
            draft("a"),
            draft("b", primary_url="   "),
            draft("c", caption=""),
            draft("d", width=-1),
            draft("e"),
        ]
        skips = SkipLog()
        records = list(normalize(drafts, skips, key_factory=counting_keys()))

        self.assertEqual([r.order_index for r in records], [1, 2])
        self.assertEqual(
            [(s.source_ref, s.reason) for s in skips.sample],
            [("b", "missing URL"), ("c", "empty caption"), ("d", "negative width/height")],
        )

    def test_duplicate_supplied_key(self):
        drafts = [draft("row 1", image_key="k"), draft("row 2"), draft("row 3", image_key=" k ")]
        records = normalize(drafts, SkipLog(), key_factory=counting_keys())

        with self.assertRaises(DuplicateImageKeyError) as ctx:
            list(records)
        self.assertEqual(
            ctx.exception.message,
            "duplicate image key 'k': supplied by row 1 and row 3",
        )

    def test_generated_key_collision_is_drawn_again(self):
        keys = iter(["same", "same", "other"])
        drafts = [draft("a"), draft("b")]
        records = list(normalize(drafts, SkipLog(), key_factory=lambda: next(keys)))
        self.assertEqual([r.image_key for r in records], ["same", "other"])

    def test_generated_key_does_not_reuse_supplied_key(self):
        keys = iter(["taken", "fresh"])
        drafts = [draft("a", image_key="taken"), draft("b")]
        records = list(normalize(drafts, SkipLog(), key_factory=lambda: next(keys)))
        self.assertEqual([r.image_key for r in records], ["taken", "fresh"])

    def test_empty_input(self):
        with self.assertRaises(EmptyResultError) as ctx:
            list(normalize([], SkipLog(), empty_message="nothing here"))
        self.assertEqual(ctx.exception.message, "nothing here")


class SkipLogTestCase(unittest.TestCase):
    def test_counts_beyond_sample(self):
        skips = SkipLog(sample_size=2)
        results = [skips.add(f"row {i}", "bad") for i in range(1, 5)]

        self.assertEqual(results, [True, True, False, False])
        self.assertEqual(skips.count, 4)
        self.assertEqual(len(skips), 4)
        self.assertEqual([s.source_ref for s in skips.sample], ["row 1", "row 2"])

    def test_empty_log_is_falsy(self):
        self.assertFalse(SkipLog())
