"""
Tests for the models module.
"""
import unittest
import sys
import os

from pydantic import ValidationError

# Add the parent directory to the path so we can import the application modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from models import (KIND_PLAYLIST, AnalysisReport, AnalyzeRequest, AnalyzeResponse,
                    PlaylistMembers, RunTotals, SourceResult, VideoDetail)


class TestVideoDetail(unittest.TestCase):
    """Test cases for VideoDetail."""

    def test_from_api_response(self):
        item = {
            "id": "abc",
            "snippet": {"title": "Intro", "channelTitle": "Chan",
                        "thumbnails": {"default": {"url": "https://i.ytimg.com/vi/abc/default.jpg"}}},
            "contentDetails": {"duration": "PT1M5S"},
        }
        detail = VideoDetail.from_api_response(item)

        self.assertEqual(detail.duration_seconds, 65)
        self.assertEqual(detail.title, "Intro")
        self.assertEqual(detail.thumbnail, "https://i.ytimg.com/vi/abc/default.jpg")
        self.assertEqual(detail.to_entry().duration, "00:01:05")

    def test_from_api_response_missing_fields(self):
        detail = VideoDetail.from_api_response({"id": "live1", "snippet": {}})
        self.assertEqual(detail.duration_seconds, 0)
        self.assertEqual(detail.thumbnail, "")


class TestPlaylistMembers(unittest.TestCase):

    def test_video_ids_skip_entries_without_id(self):
        members = PlaylistMembers(playlist_id="PL1", items=[
            {"snippet": {"resourceId": {"videoId": "a"}}},
            {"snippet": {}},
            {"snippet": {"resourceId": {"videoId": "b"}}},
        ])
        self.assertEqual(members.video_ids, ["a", "b"])


class TestAnalyzeRequest(unittest.TestCase):

    def test_references_are_stripped(self):
        request = AnalyzeRequest(references=["  PL1 ", "", "   ", "vid"])
        self.assertEqual(request.references, ["PL1", "vid"])

    def test_range_spec(self):
        spec = AnalyzeRequest(references=["PL1"], range_start=2).range_spec()
        self.assertEqual(spec.start, 2)
        self.assertIsNone(spec.end)

    def test_rejects_invalid_values(self):
        with self.assertRaises(ValidationError):
            AnalyzeRequest(references=["PL1"], range_end=0)
        with self.assertRaises(ValidationError):
            AnalyzeRequest(references=["PL1"], playback_speed=0)

    def test_per_request_api_key_is_ignored(self):
        """The service key comes from configuration only."""
        request = AnalyzeRequest(references=["PL1"], api_key="caller-key")
        self.assertEqual(request.references, ["PL1"])
        self.assertFalse(hasattr(request, "api_key"))


class TestAnalyzeResponse(unittest.TestCase):

    def test_from_report(self):
        result = SourceResult(id="PL1", kind=KIND_PLAYLIST, title="T", channel_title="C",
                              video_count=3, total_count=10, range_info="Videos 1 to 3 of 10",
                              duration_seconds=5400, average_duration_seconds=1800)
        report = AnalysisReport(results=[result], totals=RunTotals.from_results([result]), run_id="abcd1234")

        response = AnalyzeResponse.from_report(report, custom_speed=3.0)

        self.assertEqual(response.totals.formatted_duration, "01:30:00")
        self.assertEqual(response.results[0].formatted_average_duration, "00:30:00")
        self.assertEqual(response.results[0].speed_durations["1.50x"], "01:00:00")
        self.assertEqual(response.results[0].speed_durations["3.00x"], "00:30:00")
        self.assertEqual(response.run_id, "abcd1234")


if __name__ == '__main__':
    unittest.main()
