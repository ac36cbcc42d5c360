import configparser
from pathlib import Path

from advisor.cascade import AdvisorPolicy

SETTINGS_PATH = Path(__file__).with_name("settings.ini")
SECTION = "advisor"

DRAW_COUNT_ORDER = (1, 3)

DEFAULT_SETTINGS = {
    "draw_count": "1",
    "conservative_foundations": "1",
    "verbosity": "0",
    "max_moves": "1000",
}


def _int_or_default(data, key):
    try:
        return int(str(data.get(key, "")).strip())
    except ValueError:
        return int(DEFAULT_SETTINGS[key])


def _sanitize(settings):
    data = dict(DEFAULT_SETTINGS)
    data.update(settings)

    draw_count = _int_or_default(data, "draw_count")
    if draw_count not in DRAW_COUNT_ORDER:
        draw_count = int(DEFAULT_SETTINGS["draw_count"])
    data["draw_count"] = str(draw_count)

    conservative = _int_or_default(data, "conservative_foundations")
    data["conservative_foundations"] = "1" if conservative else "0"

    data["verbosity"] = str(max(-3, min(_int_or_default(data, "verbosity"), 3)))

    max_moves = _int_or_default(data, "max_moves")
    if max_moves < 1:
        max_moves = int(DEFAULT_SETTINGS["max_moves"])
    data["max_moves"] = str(max_moves)

    return {k: data[k] for k in DEFAULT_SETTINGS}


def load_settings(path=None):
    path = Path(path) if path is not None else SETTINGS_PATH
    parser = configparser.ConfigParser()
    if not path.exists():
        return dict(DEFAULT_SETTINGS)
    try:
        parser.read(path, encoding="utf-8")
    except configparser.Error:
        return dict(DEFAULT_SETTINGS)
    if SECTION not in parser:
        return dict(DEFAULT_SETTINGS)
    raw = {key: parser[SECTION].get(key, DEFAULT_SETTINGS[key]) for key in DEFAULT_SETTINGS}
    return _sanitize(raw)


def save_settings(settings, path=None):
    path = Path(path) if path is not None else SETTINGS_PATH
    parser = configparser.ConfigParser()
    parser[SECTION] = _sanitize(settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        parser.write(f)


def policy_from_settings(settings) -> AdvisorPolicy:
    data = _sanitize(settings)
    return AdvisorPolicy(conservative_foundations=data["conservative_foundations"] == "1")


def is_turn3(settings) -> bool:
    return _sanitize(settings)["draw_count"] == "3"
