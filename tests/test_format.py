"""Tests for size formatting: raw block counts and human-readable tiers."""

import unittest

import du


class HumanReadableTests(unittest.TestCase):
    def test_zero_prints_without_suffix(self):
        self.assertEqual(du.human_readable(0), "0")

    def test_small_kilobyte_values_keep_one_decimal(self):
        self.assertEqual(du.human_readable(1), "1.0K")
        self.assertEqual(du.human_readable(4), "4.0K")
        self.assertEqual(du.human_readable(9), "9.0K")

    def test_ten_or_more_drops_the_decimal(self):
        self.assertEqual(du.human_readable(10), "10K")
        self.assertEqual(du.human_readable(1023), "1023K")

    def test_tier_boundaries(self):
        self.assertEqual(du.human_readable(1024), "1.0M")
        self.assertEqual(du.human_readable(10240), "10M")
        self.assertEqual(du.human_readable(1024 ** 2), "1.0G")
        self.assertEqual(du.human_readable(1024 ** 3), "1.0T")

    def test_rounding_is_always_up(self):
        self.assertEqual(du.human_readable(1025), "1.1M")
        self.assertEqual(du.human_readable(10241), "11M")
        # 1.5M exactly stays 1.5M; one more kilobyte pushes it to 1.6M.
        self.assertEqual(du.human_readable(1536), "1.5M")
        self.assertEqual(du.human_readable(1537), "1.6M")

    def test_largest_tier_is_terabytes(self):
        self.assertEqual(du.human_readable(12 * 1024 ** 3), "12T")
        self.assertEqual(du.human_readable(2048 * 1024 ** 3), "2048T")


class FormatLineTests(unittest.TestCase):
    def test_raw_size_is_left_justified_in_eight_columns(self):
        self.assertEqual(du.format_line(5, "x"), "5       x")
        self.assertEqual(du.format_line(0, "x"), "0       x")

    def test_wide_sizes_are_not_truncated(self):
        self.assertEqual(du.format_line(123456789, "x"), "123456789x")

    def test_human_readable_uses_same_field(self):
        self.assertEqual(du.format_line(1024, "dir", human=True), "1.0M    dir")
        self.assertEqual(du.format_line(0, "empty", human=True), "0       empty")


class DiskUsageTests(unittest.TestCase):
    def test_blocks_are_halved(self):
        class Stats:
            st_blocks = 9
            st_size = 0

        self.assertEqual(du.disk_usage(Stats()), 4)

    def test_falls_back_to_size_without_st_blocks(self):
        class Stats:
            st_size = 1025

        # 1025 bytes occupy three 512-byte blocks.
        self.assertEqual(du.disk_usage(Stats()), 1)


if __name__ == "__main__":
    unittest.main()
