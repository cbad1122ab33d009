import pytest

from core.beatmap import BeatmapParser, BreakPeriod, HitObject, TimingPoint, parse_beatmap
from core.beatmap.model import UNKNOWN_CREATOR, UNKNOWN_SET_ID, UNKNOWN_TITLE


class TestMetadata:
    def test_sample_metadata(self, parser, sample_content):
        metadata = parser.parse_string(sample_content).metadata
        assert metadata.title == 'Sample Song'
        assert metadata.title_unicode == 'サンプル'
        assert metadata.artist == 'Sample Artist'
        # 空的 ArtistUnicode 沿用 Artist
        assert metadata.artist_unicode == 'Sample Artist'
        assert metadata.creator == 'MapperOne'
        assert metadata.version == "MapperOne's Insane"
        assert metadata.audio == 'audio.mp3'
        assert metadata.preview_time == 12345
        assert metadata.background == 'bg.jpg'

    def test_beatmapset_id_becomes_url(self, parser, sample_content):
        metadata = parser.parse_string(sample_content).metadata
        assert metadata.beatmap_set_id == 'https://osu.ppy.sh/beatmapsets/123456'
        assert metadata.is_uploaded

    @pytest.mark.parametrize('raw', ['-1', '0', 'abc'])
    def test_beatmapset_id_kept_when_not_positive(self, parser, raw):
        metadata = parser.parse_string(f"[Metadata]\nBeatmapSetID:{raw}\n").metadata
        assert metadata.beatmap_set_id == raw
        assert not metadata.is_uploaded

    def test_placeholders_when_missing(self, parser):
        metadata = parser.parse_string("osu file format v14\n").metadata
        assert metadata.title == UNKNOWN_TITLE
        assert metadata.title_unicode == UNKNOWN_TITLE
        assert metadata.creator == UNKNOWN_CREATOR
        assert metadata.beatmap_set_id == UNKNOWN_SET_ID
        assert metadata.preview_time == -1
        assert metadata.audio == ''

    def test_keys_are_case_insensitive(self, parser):
        metadata = parser.parse_string("[metadata]\nTITLE : Loud \n[GENERAL]\naudiofilename:\tsong.ogg\n").metadata
        assert metadata.title == 'Loud'
        assert metadata.audio == 'song.ogg'

    def test_invalid_preview_time_keeps_default(self, parser):
        metadata = parser.parse_string("[General]\nPreviewTime: soon\n").metadata
        assert metadata.preview_time == -1

    def test_lines_outside_known_sections_are_ignored(self, parser):
        content = "[Storyboard]\nTitle:Wrong\n[Metadata]\nTitle:Right\n"
        assert parser.parse_string(content).metadata.title == 'Right'


class TestEvents:
    def test_background_image(self, parser):
        parsed = parser.parse_string('[Events]\n0,0,"bg.png",0,0\n')
        assert parsed.metadata.background == 'bg.png'

    def test_video_background_rejected(self, parser):
        parsed = parser.parse_string('[Events]\n0,0,"video.mp4",0,0\n')
        assert parsed.metadata.background == ''

    def test_background_extension_case_insensitive(self, parser):
        parsed = parser.parse_string('[Events]\n0,0, "Cover.JPEG" ,0,0\n')
        assert parsed.metadata.background == 'Cover.JPEG'

    def test_break_periods(self, parser):
        parsed = parser.parse_string("[Events]\n2,1000,2000\nBreak,3000,4000\n2,5000,5000\n2,7000,6000\n")
        assert parsed.break_periods == [BreakPeriod(1000, 2000), BreakPeriod(3000, 4000)]

    def test_short_event_lines_ignored(self, parser):
        parsed = parser.parse_string("[Events]\n2,1000\n0,0\n")
        assert parsed.break_periods == []
        assert parsed.metadata.background == ''


class TestEditor:
    def test_bookmarks_drop_invalid_tokens(self, parser):
        parsed = parser.parse_string("[Editor]\nBookmarks: 100,,200,abc,300\n")
        assert parsed.bookmarks == [100, 200, 300]

    def test_empty_bookmarks(self, parser):
        parsed = parser.parse_string("[Editor]\nBookmarks:\n")
        assert parsed.bookmarks == []

    def test_multiple_bookmark_lines_accumulate(self, parser):
        parsed = parser.parse_string("[Editor]\nBookmarks: 100\nBookmarks: 200,300\n")
        assert parsed.bookmarks == [100, 200, 300]

    def test_bookmarks_only_in_editor_section(self, parser):
        parsed = parser.parse_string("[General]\nBookmarks: 100\n")
        assert parsed.bookmarks == []


class TestTimingPoints:
    def test_timing_points(self, parser, sample_content):
        parsed = parser.parse_string(sample_content)
        assert parsed.timing_points == [
            TimingPoint(0, 500.0, True),
            TimingPoint(3000, -50.0, False),
        ]

    def test_missing_uninherited_field_defaults_to_uninherited(self, parser):
        parsed = parser.parse_string("[TimingPoints]\n100,400\n200,-100,4,2,0,60\n")
        assert [point.uninherited for point in parsed.timing_points] == [True, True]

    def test_short_or_invalid_lines_skipped(self, parser):
        parsed = parser.parse_string("[TimingPoints]\n100\nabc,400\n100,x\n")
        assert parsed.timing_points == []

    def test_slider_multiplier(self, parser, sample_content):
        assert parser.parse_string(sample_content).slider_multiplier == 1.4

    @pytest.mark.parametrize('raw', ['', 'fast', '0'])
    def test_slider_multiplier_defaults(self, parser, raw):
        parsed = parser.parse_string(f"[Difficulty]\nSliderMultiplier:{raw}\n")
        assert parsed.slider_multiplier == 1.0


class TestHitObjects:
    def test_sample_intervals(self, parser, sample_content):
        parsed = parser.parse_string(sample_content)
        assert parsed.hit_starts == [0, 1000, 1200, 4000]
        # slider 1000 → 1500；spinner 4000 → 5000
        assert parsed.hit_ends == [0, 1500, 1200, 5000]

    def test_slider_without_timing_points_uses_defaults(self, parser):
        content = "[HitObjects]\n0,0,0,2,0,L|10:10,1,100\n"
        parsed = parser.parse_string(content)
        # 100 / (1.0 * 100 * 1.0) * 500 * 1
        assert parsed.hit_ends == [500]

    def test_slider_uses_inherited_scroll_velocity(self, parser):
        content = (
            "[Difficulty]\nSliderMultiplier:1\n"
            "[TimingPoints]\n0,500,4,2,0,60,1,0\n1000,-50,4,2,0,60,0,0\n"
            "[HitObjects]\n0,0,1500,2,0,L|10:10,2,100\n"
        )
        parsed = parser.parse_string(content)
        # sv = 2.0 → 100 / 200 * 500 * 2
        assert parsed.hit_ends == [2000]

    def test_slider_with_too_few_fields_is_instant(self, parser):
        parsed = parser.parse_string("[HitObjects]\n0,0,700,2,0,L|10:10\n")
        assert parsed.hit_ends == [700]

    def test_slider_invalid_slides_and_length(self, parser):
        parsed = parser.parse_string("[HitObjects]\n0,0,700,2,0,L|10:10,x,y\n")
        assert parsed.hit_ends == [700]

    def test_negative_slider_duration_clamped(self, parser):
        parsed = parser.parse_string("[TimingPoints]\n0,-500\n[HitObjects]\n0,0,100,2,0,L|1:1,1,100\n")
        assert parsed.hit_starts == [100]
        assert parsed.hit_ends == [100]

    def test_spinner_end_time(self, parser):
        parsed = parser.parse_string("[HitObjects]\n256,192,1000,8,0,3000\n256,192,4000,8,0,abc\n")
        assert parsed.hit_ends == [3000, 4000]

    def test_mania_hold_end_time(self, parser):
        parsed = parser.parse_string("[HitObjects]\n64,192,1000,128,0,1800:0:0:0:0:\n")
        assert parsed.hit_ends == [1800]

    def test_end_never_before_start(self, parser):
        parsed = parser.parse_string("[HitObjects]\n256,192,5000,8,0,1000\n")
        assert parsed.hit_ends == [5000]

    def test_slider_takes_priority_over_spinner(self, parser):
        parsed = parser.parse_string("[HitObjects]\n0,0,0,10,0,9999,1,100\n")
        assert parsed.hit_ends == [500]

    def test_gap_fill_extends_previous_slider(self, parser):
        content = "[HitObjects]\n0,0,0,2,0,L|10:10,1,100\n0,0,800,1,0\n0,0,900,1,0\n"
        parsed = parser.parse_string(content)
        assert parsed.hit_ends == [800, 800, 900]

    def test_gap_fill_keeps_longer_slider(self, parser):
        content = "[HitObjects]\n0,0,0,2,0,L|10:10,1,100\n0,0,100,1,0\n"
        parsed = parser.parse_string(content)
        assert parsed.hit_ends == [500, 100]

    def test_short_lines_skipped(self, parser):
        parsed = parser.parse_string("[HitObjects]\n0,0,100\n0,0,x,1\n0,0,200,1\n")
        assert parsed.hit_starts == [200]
        assert len(parsed.hit_starts) == len(parsed.hit_ends)


class TestWholeFile:
    def test_bom_does_not_change_result(self, parser, sample_content):
        assert parser.parse_string('\ufeff' + sample_content) == parser.parse_string(sample_content)

    def test_crlf_does_not_change_result(self, parser, sample_content):
        assert parser.parse_string(sample_content.replace('\n', '\r\n')) == parser.parse_string(sample_content)

    def test_parse_bytes_with_bom(self, parser, sample_content):
        data = b'\xef\xbb\xbf' + sample_content.encode('utf-8')
        assert parser.parse_bytes(data) == parser.parse_string(sample_content)

    def test_parse_file(self, parser, sample_content, tmp_path):
        path = tmp_path / 'map.osu'
        path.write_text(sample_content, encoding='utf-8')
        assert parser.parse_file(str(path)).metadata.title == 'Sample Song'

    def test_garbage_content_yields_empty_result(self, parser):
        parsed = parser.parse_string("\x00\x01 nonsense\n[HitObjects\n,,,,\n")
        assert parsed.hit_starts == []
        assert parsed.bookmarks == []

    def test_content_duration(self, parser, sample_content):
        # 最晚為休息區段結束 9000 + 1000
        assert parser.parse_string(sample_content).content_duration() == 10000

    def test_content_duration_empty(self, parser):
        assert parser.parse_string("").content_duration() == 0

    def test_parse_beatmap_helper(self, sample_content):
        assert parse_beatmap(sample_content).hit_starts == [0, 1000, 1200, 4000]


class TestHeader:
    def test_parse_header(self, parser, sample_content):
        header = parser.parse_header(sample_content)
        assert header.creator == 'MapperOne'
        assert header.version == "MapperOne's Insane"

    def test_parse_header_missing_fields(self, parser):
        header = parser.parse_header("[General]\nCreator: not metadata\n")
        assert header.creator == ''
        assert header.version == ''

    def test_header_matches(self, parser, sample_content):
        header = parser.parse_header(sample_content)
        assert header.matches('mapperone')
        assert header.matches('INSANE')
        assert not header.matches('someone')

    def test_read_header_strips_bom_and_truncates(self, parser, sample_content, tmp_path):
        path = tmp_path / 'map.osu'
        path.write_bytes(b'\xef\xbb\xbf' + sample_content.encode('utf-8'))
        header = parser.read_header(str(path), size=64)
        assert not header.startswith('\ufeff')
        assert header.startswith('osu file format v14')
        assert len(header) < 64

    def test_read_header_cut_inside_multibyte_character(self, parser, tmp_path):
        path = tmp_path / 'map.osu'
        path.write_bytes('[Metadata]\nCreator:あ'.encode('utf-8'))
        # 最後一個字元被截斷
        header = parser.read_header(str(path), size=len('[Metadata]\nCreator:'.encode('utf-8')) + 1)
        assert parser.parse_header(header).creator == ''


def test_parser_shared_between_parses(sample_content):
    parser = BeatmapParser()
    first = parser.parse_string(sample_content)
    parser.parse_string("[HitObjects]\n0,0,1,1\n")
    second = parser.parse_string(sample_content)
    assert first == second


def test_hit_object_type_flags():
    assert HitObject(0, 0, 6).is_slider
    assert HitObject(0, 0, 12).is_spinner
    assert HitObject(0, 0, 128).is_hold
    assert not HitObject(0, 0, 1).is_slider
