from importlib import resources

FONT_FILE = "Virgil-Regular.woff2"


def load_font_bytes(name: str = FONT_FILE) -> bytes:
    with resources.files(__package__).joinpath(f"data/fonts/{name}").open("rb") as fh:
        return fh.read()


def load_usage() -> str:
    with resources.files(__package__).joinpath("data/usage.txt").open("r", encoding="utf-8") as fh:
        return fh.read()
