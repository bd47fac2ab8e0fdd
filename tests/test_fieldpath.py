import pytest

from xpkit.fieldpath import (
    FieldPathError,
    Segment,
    Segments,
    SegmentType,
    field,
    field_or_index,
    parse,
)


@pytest.mark.parametrize(
    "segments, want",
    [
        (Segments([field("spec")]), "spec"),
        (Segments([field_or_index("0")]), "[0]"),
        (
            Segments([field("spec"), field("containers"), field_or_index("0"), field("name")]),
            "spec.containers[0].name",
        ),
        (Segments([field("data"), field(".config.yml")]), "data[.config.yml]"),
    ],
)
def test_segments_str(segments, want):
    assert str(segments) == want


def test_segments_slice_keeps_rendering():
    s = parse("spec.containers[0].name")
    assert str(s[:3]) == "spec.containers[0]"


@pytest.mark.parametrize(
    "s, want",
    [
        ("coolField", Segment(type=SegmentType.FIELD, field="coolField")),
        ("'coolField'", Segment(type=SegmentType.FIELD, field="coolField")),
        ("'cool.Field'", Segment(type=SegmentType.FIELD, field="cool.Field")),
        ("3", Segment(type=SegmentType.INDEX, index=3)),
        ("-3", Segment(type=SegmentType.FIELD, field="-3")),
        ("3.0", Segment(type=SegmentType.FIELD, field="3.0")),
        (str(2**32), Segment(type=SegmentType.FIELD, field=str(2**32))),
        (str(2**32 - 1), Segment(type=SegmentType.INDEX, index=2**32 - 1)),
        ("+3", Segment(type=SegmentType.FIELD, field="+3")),
    ],
)
def test_field_or_index(s, want):
    assert field_or_index(s) == want


@pytest.mark.parametrize(
    "path, want",
    [
        ("spec", [field("spec")]),
        ("[0]", [field_or_index("0")]),
        ("metadata.name", [field("metadata"), field("name")]),
        (
            "fields[1].state.current",
            [field("fields"), field_or_index("1"), field("state"), field("current")],
        ),
        ("items[0]", [field("items"), field_or_index("0")]),
        (
            "spec.containers[0].name",
            [field("spec"), field("containers"), field_or_index("0"), field("name")],
        ),
        (
            "nested[0][1].name",
            [field("nested"), field_or_index("0"), field_or_index("1"), field("name")],
        ),
        (
            "spec[containers][0].name",
            [field("spec"), field("containers"), field_or_index("0"), field("name")],
        ),
        ("data[.config.yml]", [field("data"), field_or_index(".config.yml")]),
        (
            "metadata.labels['app.hash']",
            [field("metadata"), field("labels"), field_or_index("app.hash")],
        ),
        ("", []),
    ],
)
def test_parse(path, want):
    assert parse(path) == want


@pytest.mark.parametrize(
    "path, message",
    [
        (".metadata.name", "unexpected '.' at position 0"),
        ("metadata.name.", "unexpected '.' at position 13"),
        ("spec.containers.[0].name", "unexpected '[' at position 16"),
        ("metadata..name", "unexpected '.' at position 9"),
        ("metadata.]name", "unexpected ']' at position 9"),
        ("spec[bracketed[name]]", "unexpected '[' at position 14"),
        ("spec[name", "unterminated '[' at position 4"),
        ("spec[]", "unexpected ']' at position 5"),
    ],
)
def test_parse_errors(path, message):
    with pytest.raises(FieldPathError) as excinfo:
        parse(path)
    assert str(excinfo.value) == message


def test_parse_error_position_counts_bytes():
    with pytest.raises(FieldPathError) as excinfo:
        parse("\u00e4..b")
    assert excinfo.value.position == 3
    assert excinfo.value.reason == "unexpected '.'"


def test_parse_round_trips_through_str():
    path = "spec.containers[0].name"
    assert str(parse(path)) == path
    assert parse(str(parse("data[.config.yml]"))) == parse("data[.config.yml]")