import json
import sys


def _default(obj):
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return str(obj)


def json_print(obj) -> None:
    try:
        print(json.dumps(obj, ensure_ascii=False, indent=2, default=_default))
    except UnicodeEncodeError:
        print(json.dumps(obj, ensure_ascii=True, indent=2, default=_default))


def print_error(message: str) -> None:
    print(f" {message}", file=sys.stderr)
