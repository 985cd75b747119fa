"""Render a short report paragraph from a resolved data set.

The placeholder syntax belongs to this script, not to datatex: ``{{name args}}``
calls a helper, ``{{key}}`` inserts a value, and ``(name args)`` nests a call.

Usage:
    python examples/render_report.py examples/glacier_survey.toml
"""

import re
import sys
from pathlib import Path

import datatex as dt

TEMPLATE = """\
Between {{first_year}} and {{last_year}} ({{survey.years}} years) the glacier
retreated {{roundup 1 survey.retreat_m}} m, or {{survey.retreat_rate}} m per year.
Its area is {{pm 2 survey.area_km2}} km$^2$ ({{round 1 ice.share_percent}} % of the range),
based on {{sep n_measurements}} measurements and roughly {{sep (roundup 6 ice.volume_m3)}} m$^3$ of ice.
"""

_PLACEHOLDER = re.compile(r"\{\{(.+?)\}\}")
_TOKEN = re.compile(r"\(|\)|[^\s()]+")


def _parse_args(tokens: list[str]) -> list[object]:
    args: list[object] = []
    while tokens:
        token = tokens.pop(0)
        if token == "(":
            name = tokens.pop(0)
            inner: list[str] = []
            depth = 1
            while depth:
                t = tokens.pop(0)
                depth += {"(": 1, ")": -1}.get(t, 0)
                if depth:
                    inner.append(t)
            args.append(dt.HelperCall(name, *_parse_args(inner)))
        elif re.fullmatch(r"-?\d+", token):
            args.append(int(token))
        elif re.fullmatch(r"-?\d*\.\d+", token):
            args.append(float(token))
        else:
            args.append(dt.Ref(token))
    return args


def render(template: str, library: dt.HelperLibrary) -> str:
    def substitute(match: re.Match[str]) -> str:
        tokens = _TOKEN.findall(match.group(1))
        if len(tokens) == 1:
            return dt.render_value(library.context.data[tokens[0]])
        name, *rest = tokens
        return library.render(name, *_parse_args(rest))

    return _PLACEHOLDER.sub(substitute, template)


def main() -> None:
    data = dt.resolve_file(Path(sys.argv[1]))
    library = dt.HelperLibrary(dt.HelperContext(data))
    print(render(TEMPLATE, library))  # noqa: T201


if __name__ == "__main__":
    main()
