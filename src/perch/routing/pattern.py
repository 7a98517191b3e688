"""Path template compilation.

A template is a ``/``-delimited path in which any segment of the exact
form ``{name}`` captures one non-empty, slash-free run of the request
path. Everything else is matched literally::

    "/posts/{slug}/comments/{cid}"  matches  "/posts/hello/comments/42"
    "/files/{name}"                 rejects  "/files/a/b"
    "/files/report.{ext}"           literal  (partial-segment braces)

Compilation never fails: malformed braces are just literal text.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache

_PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_]+)\}")

# One path component; never crosses a separator
_CAPTURE = r"([^/]+)"


@dataclass(frozen=True, slots=True)
class Segment:
    """One ``/``-separated piece of a template.

    Literal:  ``users``  (param_name=None)
    Param:    ``{id}``   (param_name="id")
    """

    value: str
    param_name: str | None = None

    @property
    def is_param(self) -> bool:
        return self.param_name is not None


def parse_template(template: str) -> tuple[Segment, ...]:
    """Split a normalized template into segments.

    Examples::

        "/"             -> ()
        "/users"        -> (Segment("users"),)
        "/users/{id}"   -> (Segment("users"), Segment("{id}", param_name="id"))
    """
    body = template[1:] if template.startswith("/") else template
    if not body:
        return ()
    segments: list[Segment] = []
    for part in body.split("/"):
        placeholder = _PLACEHOLDER.fullmatch(part)
        if placeholder is not None:
            segments.append(Segment(value=part, param_name=placeholder.group(1)))
        else:
            segments.append(Segment(value=part))
    return tuple(segments)


@dataclass(frozen=True, slots=True)
class Matcher:
    """Compiled, anchored form of a path template.

    Equality is structural, so compiling the same template twice gives
    equal matchers.
    """

    template: str
    segments: tuple[Segment, ...]
    regex: re.Pattern[str] = field(compare=False, repr=False)

    @property
    def param_names(self) -> tuple[str, ...]:
        """Placeholder names in left-to-right order."""
        return tuple(s.param_name for s in self.segments if s.param_name is not None)

    def match_args(self, path: str) -> tuple[str, ...] | None:
        """Return the captures in template order, or ``None`` on a miss."""
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        return m.groups()

    def match(self, path: str) -> dict[str, str] | None:
        """Return placeholder name -> captured text, or ``None`` on a miss.

        A name used twice keeps its rightmost capture.
        """
        args = self.match_args(path)
        if args is None:
            return None
        return dict(zip(self.param_names, args, strict=True))


@lru_cache(maxsize=1024)
def compile_pattern(template: str) -> Matcher:
    """Compile *template* into a :class:`Matcher`. Pure and cached."""
    segments = parse_template(template)
    pieces = [_CAPTURE if s.is_param else re.escape(s.value) for s in segments]
    source = "/" + "/".join(pieces)
    return Matcher(template=template, segments=segments, regex=re.compile(source))
