"""Tests for the palette-compressed text codec.

Critical Invariants:
- palette starts with "empty" and grows in first-occurrence order
- Every cell token ends with one space; fields follow the delimiter
- Decoding reconstructs every cell, including auxiliary data
- Malformed tokens raise instead of guessing a split
"""

import io
import json
import warnings

import pytest

from blockworld import (
    EMPTY_BLOCK,
    Block,
    DocumentFormatError,
    FileVersionMismatch,
    Layer,
    PaletteDecodeAmbiguity,
    TextCodec,
    UnknownBlockId,
    UnknownBlockName,
    World,
)
from blockworld.codecs import FIELD_DELIMITER, FILE_VERSION, to_base36


def make_document(palette, foreground, background, width=1, height=1, **extra):
    return {
        "fileVersion": 0,
        "width": width,
        "height": height,
        "palette": palette,
        "layers": {"foreground": foreground, "background": background},
        **extra,
    }


@pytest.mark.parametrize(
    "value, expected", [(0, "0"), (9, "9"), (10, "A"), (35, "Z"), (36, "10"), (1295, "ZZ")]
)
def test_to_base36(value, expected):
    assert to_base36(value) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


# Encoding


def test_one_by_one_empty_world(registry, text_codec):
    document = text_codec.encode(World(1, 1, registry))

    assert document == {
        "fileVersion": 0,
        "width": 1,
        "height": 1,
        "palette": ["empty"],
        "layers": {"foreground": "0 ", "background": "0 "},
    }


def test_palette_first_occurrence_order_foreground_first(registry, text_codec):
    world = World(2, 1, registry)
    world.place(0, 0, Layer.BACKGROUND, "basic_black")
    world.place(1, 0, Layer.FOREGROUND, "spikes")
    world.place(1, 0, Layer.BACKGROUND, "spikes")

    document = text_codec.encode(world)

    assert document["palette"] == ["empty", "spikes", "basic_black"]
    assert document["layers"]["foreground"] == "0 1 "
    assert document["layers"]["background"] == "2 1 "


def test_fields_use_delimiter(registry, text_codec):
    world = World(1, 2, registry)
    world.place(0, 0, Layer.FOREGROUND, "portal", [12, -3, 0])
    world.place(0, 1, Layer.FOREGROUND, "coin_door", [300])

    document = text_codec.encode(world)

    assert document["layers"]["foreground"] == "1:12:-3:0 2:300 "


def test_delimiter_is_fixed_by_format(registry, text_codec):
    world = World(1, 1, registry)
    world.place(0, 0, Layer.FOREGROUND, "coin_door", [5])

    assert FIELD_DELIMITER == ":"
    assert text_codec.encode(world)["layers"]["foreground"] == "1:5 "


def test_large_palette_uses_base36(registry, text_codec):
    for i in range(12):
        registry.register(f"deco_{i}", 1000 + i)
    world = World(12, 1, registry)
    for x in range(12):
        world.place(x, 0, Layer.FOREGROUND, f"deco_{x}")

    tokens = text_codec.encode(world)["layers"]["foreground"].split(" ")

    # deco_x sits at palette index x + 1
    assert tokens[8] == "9"
    assert tokens[9] == "A"
    assert tokens[11] == "C"
    assert tokens[-1] == ""


def test_extra_metadata_merged_at_top_level(registry, text_codec):
    document = text_codec.encode(World(1, 1, registry), {"name": "Lobby", "plays": 3})

    assert document["name"] == "Lobby"
    assert document["plays"] == 3


def test_extra_metadata_cannot_override_reserved_keys(registry, text_codec):
    with pytest.raises(ValueError, match="reserved"):
        text_codec.encode(World(1, 1, registry), {"palette": []})


def test_encode_unknown_block_id_raises(registry, text_codec):
    world = World(1, 1, registry)
    world.foreground[0][0] = Block(5000)

    with pytest.raises(UnknownBlockId):
        text_codec.encode(world)


def test_encode_writes_current_file_version(registry, text_codec):
    document = text_codec.encode(World(1, 1, registry))

    assert document["fileVersion"] == FILE_VERSION == 0
    with warnings.catch_warnings():
        warnings.simplefilter("error", FileVersionMismatch)
        text_codec.decode(document)


# Decoding


def test_decode_one_by_one_empty(text_codec):
    world = text_codec.decode(make_document(["empty"], "0 ", "0 "))

    assert (world.width, world.height) == (1, 1)
    assert world.block_at(0, 0, Layer.FOREGROUND).is_same_as(EMPTY_BLOCK)
    assert world.block_at(0, 0, Layer.BACKGROUND).is_same_as(EMPTY_BLOCK)


def test_decode_reconstructs_fields(registry, text_codec):
    document = make_document(
        ["empty", "portal", "coin_door"], "1:12:-3:0 2:300 ", "0 2:-1 ", width=1, height=2
    )

    world = text_codec.decode(document)

    assert world.block_at(0, 0, Layer.FOREGROUND).values == (12, -3, 0)
    assert world.block_at(0, 1, Layer.FOREGROUND).values == (300,)
    assert world.block_at(0, 1, Layer.BACKGROUND).id == registry.id_of("coin_door")
    assert world.block_at(0, 1, Layer.BACKGROUND).values == (-1,)


def test_decode_layer_without_trailing_space(text_codec):
    world = text_codec.decode(make_document(["empty", "spikes"], "0 1", "1 0", width=2))

    assert world.block_at(1, 0, Layer.FOREGROUND).id == 68
    assert world.block_at(0, 0, Layer.BACKGROUND).id == 68


def test_decode_keeps_column_major_order(text_codec):
    world = text_codec.decode(
        make_document(["empty", "spikes"], "0 1 0 0 ", "0 0 0 0 ", width=2, height=2)
    )

    assert world.block_at(0, 1, Layer.FOREGROUND).id == 68
    assert world.block_at(1, 0, Layer.FOREGROUND).is_same_as(EMPTY_BLOCK)


def test_decode_shares_blocks_for_identical_tokens(text_codec):
    world = text_codec.decode(make_document(["empty", "spikes"], "1 1 ", "0 0 ", width=2))

    assert world.block_at(0, 0, Layer.FOREGROUND) is world.block_at(1, 0, Layer.FOREGROUND)


def test_decode_undelimited_fields_is_ambiguous(text_codec):
    """Legacy tokens glue fields onto the index; they must not be guessed apart."""
    document = make_document(["empty", "coin_door"], "1300 ", "0 ")

    with pytest.raises(PaletteDecodeAmbiguity, match="palette index"):
        text_codec.decode(document)


@pytest.mark.parametrize(
    "token, match",
    [
        ("1", "carries 0 field"),
        ("1:2:3", "carries 2 field"),
        ("1:x", "Malformed field"),
        ("1:", "Malformed field"),
        ("a", "Malformed palette index"),
        ("-1", "Malformed palette index"),
        ("1:2147483648", "Invalid field"),
    ],
)
def test_decode_malformed_tokens(text_codec, token, match):
    document = make_document(["empty", "coin_door"], f"{token} ", "0 ")

    with pytest.raises(PaletteDecodeAmbiguity, match=match):
        text_codec.decode(document)


def test_decode_fields_on_fieldless_block_rejected(text_codec):
    with pytest.raises(PaletteDecodeAmbiguity):
        text_codec.decode(make_document(["empty"], "0:1 ", "0 "))


@pytest.mark.parametrize("layer", ["0 ", "0 0 0 ", "", "0  0 "])
def test_decode_wrong_cell_count(text_codec, layer):
    with pytest.raises(DocumentFormatError):
        text_codec.decode(make_document(["empty"], layer, "0 0 ", width=2))


def test_decode_unknown_palette_name(text_codec):
    with pytest.raises(UnknownBlockName):
        text_codec.decode(make_document(["empty", "mystery"], "0 ", "0 "))


@pytest.mark.parametrize(
    "mutation",
    [
        {"width": 0},
        {"height": "tall"},
        {"palette": []},
        {"layers": {"foreground": "0 "}},
    ],
)
def test_decode_invalid_document_shape(text_codec, mutation):
    document = make_document(["empty"], "0 ", "0 ")
    document.update(mutation)

    with pytest.raises(DocumentFormatError, match="Invalid world document"):
        text_codec.decode(document)


def test_decode_missing_file_version(text_codec):
    document = make_document(["empty"], "0 ", "0 ")
    del document["fileVersion"]

    with pytest.raises(DocumentFormatError):
        text_codec.decode(document)


def test_decode_newer_file_version_warns(text_codec):
    document = make_document(["empty"], "0 ", "0 ")
    document["fileVersion"] = 7

    with pytest.warns(FileVersionMismatch, match="7"):
        world = text_codec.decode(document)

    assert world.block_at(0, 0, Layer.FOREGROUND).is_same_as(EMPTY_BLOCK)


def test_decoded_world_uses_configured_border(registry):
    codec = TextCodec(registry, border_block="basic_black")

    world = codec.decode(make_document(["empty"], "0 ", "0 "))
    world.clear(border=True)

    assert world.block_at(0, 0, Layer.FOREGROUND).id == 12


# Round trips


def _sample_world(registry):
    world = World(4, 3, registry)
    world.clear(border=True)
    world.place(1, 1, Layer.FOREGROUND, "portal", [1, -20, 300])
    world.place(2, 1, Layer.FOREGROUND, "coin_door", [-2147483648])
    world.place(1, 1, Layer.BACKGROUND, "basic_black")
    world.place(3, 2, Layer.BACKGROUND, "coin_door", [15])
    return world


def test_round_trip_with_fields(registry, text_codec):
    world = _sample_world(registry)

    assert text_codec.decode(text_codec.encode(world)).is_same_as(world)


def test_dumps_loads(registry, text_codec):
    world = _sample_world(registry)

    text = text_codec.dumps(world, {"name": "Arena"})

    assert json.loads(text)["name"] == "Arena"
    assert text_codec.loads(text).is_same_as(world)


def test_dump_streams_equivalent_document(registry, text_codec):
    world = _sample_world(registry)
    buffer = io.StringIO()

    text_codec.dump(world, buffer, {"name": "Arena", "tags": ["pvp"]})

    assert json.loads(buffer.getvalue()) == text_codec.encode(
        world, {"name": "Arena", "tags": ["pvp"]}
    )


def test_dump_escapes_metadata(registry, text_codec):
    world = _sample_world(registry)
    buffer = io.StringIO()

    text_codec.dump(world, buffer, {"name": 'The "Pit"\n'})
    buffer.seek(0)

    assert json.loads(buffer.getvalue())["name"] == 'The "Pit"\n'
    assert text_codec.load(buffer).is_same_as(world)


def test_dump_unknown_block_id_writes_nothing(registry, text_codec):
    world = _sample_world(registry)
    world.background[3][2] = Block(5000)
    buffer = io.StringIO()

    with pytest.raises(UnknownBlockId):
        text_codec.dump(world, buffer)

    assert buffer.getvalue() == ""


def test_dump_unserializable_metadata_writes_nothing(registry, text_codec):
    buffer = io.StringIO()

    with pytest.raises(TypeError):
        text_codec.dump(World(1, 1, registry), buffer, {"owner": object()})

    assert buffer.getvalue() == ""


def test_load_invalid_json(text_codec):
    with pytest.raises(DocumentFormatError, match="not valid JSON"):
        text_codec.load(io.StringIO("{not json"))

    with pytest.raises(DocumentFormatError, match="not valid JSON"):
        text_codec.loads("")
