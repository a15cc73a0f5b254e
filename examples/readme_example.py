import io
import warnings
from pathlib import Path

from blockworld import BinaryCodec, BufferLengthMismatch, Layer, TextCodec, World
from blockworld.config import CodecSettings, load_registry

settings = CodecSettings(registry_path=Path(__file__).with_name("blocks.json"))
registry = load_registry(settings)


def build_arena() -> World:
    """Bordered room with a portal pair and a coin door."""
    world = World(12, 8, registry, border_block=settings.border_block)
    world.clear(border=True)

    world.place(2, 3, Layer.FOREGROUND, "portal", [0, 1, 2])
    world.place(9, 3, Layer.FOREGROUND, "portal", [0, 2, 1])
    world.place(6, 6, Layer.FOREGROUND, "coin_door", [10])
    for x in range(1, 11):
        world.place(x, 1, Layer.BACKGROUND, "basic_black")
    return world


def main() -> None:
    arena = build_arena()

    # Duplicate the left portal area onto the right half
    chunk = arena.copy(1, 2, 3, 4)
    arena.paste(7, 2, chunk)

    binary = BinaryCodec(registry, border_block=settings.border_block)
    payload = binary.encode(arena)
    print(f"Binary size: {len(payload)} bytes")

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", BufferLengthMismatch)
        binary.decode(payload + b"\x00", arena.width, arena.height)
    print(f"Decoding with a stray byte: {caught[0].message}")

    text = TextCodec(registry, border_block=settings.border_block)
    out = io.StringIO()
    text.dump(arena, out, {"name": "Arena"})
    print(f"Text size: {len(out.getvalue())} chars")

    out.seek(0)
    restored = text.load(out)
    print(f"Round trip matches: {restored.is_same_as(arena)}")


if __name__ == "__main__":
    main()
