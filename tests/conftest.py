import pytest

from core.beatmap import BeatmapParser

SAMPLE_BEATMAP = """osu file format v14

[General]
AudioFilename: audio.mp3
AudioLeadIn: 0
PreviewTime: 12345
Mode: 0

[Editor]
Bookmarks: 1000,5000
DistanceSpacing: 1.2

[Metadata]
Title:Sample Song
TitleUnicode:サンプル
Artist:Sample Artist
ArtistUnicode:
Creator:MapperOne
Version:MapperOne's Insane
BeatmapID:0
BeatmapSetID:123456

[Difficulty]
HPDrainRate:5
SliderMultiplier:1.4

[Events]
//Background and Video events
0,0,"bg.jpg",0,0
Video,0,"clip.mp4"
//Break Periods
2,6000,9000

[TimingPoints]
0,500,4,2,0,60,1,0
3000,-50,4,2,0,60,0,0

[Colours]
Combo1 : 255,0,0

[HitObjects]
256,192,0,1,0,0:0:0:0:
256,192,1000,2,0,B|300:200,1,140,0|0,0:0|0:0,0:0:0:0:
256,192,1200,1,0,0:0:0:0:
256,192,4000,12,0,5000,0:0:0:0:
"""


@pytest.fixture
def parser():
    return BeatmapParser()


@pytest.fixture
def sample_content():
    return SAMPLE_BEATMAP


def make_beatmap(creator='MapperOne', version='Hard', hit_lines=('256,192,1000,1,0,0:0:0:0:',), audio='audio.mp3'):
    """產生最小的 .osu 內容"""
    return (
        "osu file format v14\n\n"
        "[General]\n"
        f"AudioFilename: {audio}\n\n"
        "[Metadata]\n"
        "Title:Song\n"
        "Artist:Artist\n"
        f"Creator:{creator}\n"
        f"Version:{version}\n\n"
        "[HitObjects]\n"
        + "\n".join(hit_lines)
        + "\n"
    )


@pytest.fixture
def songs_dir(tmp_path):
    """含三個譜面與一個非譜面檔案的 Songs 資料夾"""
    first = tmp_path / "1 Artist - Song"
    first.mkdir()
    (first / "a.osu").write_text(make_beatmap('MapperOne', 'Hard'), encoding='utf-8')
    (first / "b.OSU").write_text(make_beatmap('MapperTwo', 'Normal'), encoding='utf-8')
    (first / "notes.txt").write_text("not a map", encoding='utf-8')

    nested = tmp_path / "2 Other" / "sub"
    nested.mkdir(parents=True)
    (nested / "c.osu").write_text(make_beatmap('someone', "mapperone's Extra"), encoding='utf-8')
    return tmp_path


@pytest.fixture
def beatmap_factory():
    return make_beatmap
