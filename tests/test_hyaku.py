import io

import pytest

from botplugins.hyaku import Poem, image_names, load_poems

HEADER = "番号,歌人,上の句,下の句,上の句ひらがな,下の句ひらがな\n"


def _csv(rows):
    return io.StringIO(HEADER + "".join(",".join(r) + "\n" for r in rows))


def _rows(n=100):
    return [[str(i), f"poet{i}", f"up{i}", f"low{i}", f"uk{i}", f"lk{i}"] for i in range(1, n + 1)]


def test_load_poems():
    poems = load_poems(_csv(_rows()))
    assert len(poems) == 100
    assert poems[0] == Poem("1", "poet1", "up1", "low1", "uk1", "lk1")
    assert poems[99].poet == "poet100"


def test_load_poems_wrong_count():
    with pytest.raises(ValueError):
        load_poems(_csv(_rows(99)))


def test_load_poems_wrong_fields():
    rows = _rows()
    rows[5] = rows[5][:5]
    with pytest.raises(ValueError):
        load_poems(_csv(rows))


def test_load_poems_wrong_order():
    rows = _rows()
    rows[0][0], rows[1][0] = "2", "1"
    with pytest.raises(ValueError):
        load_poems(_csv(rows))


def test_poem_str():
    poem = Poem("1", "poet1", "up1", "low1", "uk1", "lk1")
    lines = str(poem).splitlines()
    assert len(lines) == 6
    assert lines[0] == "●番号：1"
    assert lines[1] == "◉歌人：poet1"
    assert lines[5] == "◎下の句ひらがな：lk1"
    assert str(poem).endswith("\n")


def test_image_names():
    assert image_names(1) == ("img/001.jpg", "img/001.png")
    assert image_names(100) == ("img/100.jpg", "img/100.png")


@pytest.mark.parametrize("number", [0, 101, -3])
def test_image_names_out_of_range(number):
    with pytest.raises(ValueError):
        image_names(number)