"""Font tag metadata for batch targeting.

Reads a Google-Fonts-style tags CSV (``family,location,tag[,value]`` rows)
and a fonts root holding one directory per family, and resolves a tag
expression to the font files of every family carrying a matching tag.
"""

import csv
import re
from dataclasses import dataclass
from pathlib import Path

import structlog
from fontTools.ttLib import TTFont

from strokewidth.exceptions import TagIndexError

logger = structlog.get_logger("strokewidth.tags")

FONT_SUFFIXES = {".ttf", ".otf"}

_RE_FAMILY_NAME = re.compile(r'^name:\s*"([^"]+)"', re.MULTILINE)
_RE_FILENAME = re.compile(r'filename:\s*"([^"]+)"')


@dataclass(frozen=True)
class FamilyTag:
    """One row of the tags CSV."""

    family: str
    location: str
    tag: str
    value: str = ""


def tag_matches(tag: str, expression: str) -> bool:
    """Check a tag against a filter expression.

    Expressions starting with "/" name a node of the tag hierarchy and
    match that tag or anything beneath it ("/Sans" matches "/Sans/Humanist"
    but not "/Sans Serif"). Anything else is searched for as a regular
    expression.

    Raises:
        TagIndexError: If the expression is not a valid regular expression
    """
    if expression.startswith("/"):
        node = expression.rstrip("/")
        return tag == node or tag.startswith(node + "/")
    try:
        return re.search(expression, tag) is not None
    except re.error as e:
        raise TagIndexError(f"Invalid tag filter {expression!r}: {e}") from e


def load_tags(tags_csv: Path) -> list[FamilyTag]:
    """Read tag rows, skipping blank lines, comments and a header row.

    Raises:
        TagIndexError: If the file cannot be read
    """
    try:
        with open(tags_csv, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
    except OSError as e:
        raise TagIndexError(f"Cannot read tags file '{tags_csv}': {e}") from e

    tags = []
    for row in rows:
        if not row or not row[0].strip() or row[0].startswith("#"):
            continue
        if len(row) < 3:
            logger.debug("Skipping short tag row", row=row)
            continue
        family, location, tag = (cell.strip() for cell in row[:3])
        if family.lower() == "family" and tag.lower() == "tag":
            continue
        value = row[3].strip() if len(row) > 3 else ""
        tags.append(FamilyTag(family, location, tag, value))
    return tags


def read_family_metadata(family_dir: Path) -> tuple[str, list[Path]] | None:
    """Family name and font files from a directory's METADATA.pb, if it has one."""
    metadata = family_dir / "METADATA.pb"
    if not metadata.exists():
        return None
    text = metadata.read_text(encoding="utf-8", errors="ignore")
    match = _RE_FAMILY_NAME.search(text)
    if match is None:
        return None
    fonts = [family_dir / name for name in _RE_FILENAME.findall(text)]
    return match.group(1), [p for p in fonts if p.exists()]


class TagIndex:
    """Index of family tags and family font files.

    Example:
        index = TagIndex(Path("~/oss/fonts"), Path("tags/all/families.csv"))
        for family, font_path in index.resolve("/Sans"):
            ...
    """

    def __init__(self, fonts_root: Path, tags_csv: Path) -> None:
        if not fonts_root.is_dir():
            raise TagIndexError(f"Fonts root '{fonts_root}' is not a directory")
        self.fonts_root = fonts_root
        self.tags_csv = tags_csv
        self._tags: list[FamilyTag] | None = None
        self._families: dict[str, list[Path]] | None = None

    def tags(self) -> list[FamilyTag]:
        if self._tags is None:
            self._tags = load_tags(self.tags_csv)
        return self._tags

    def families(self) -> dict[str, list[Path]]:
        """Map family name to its font files.

        Directories with a METADATA.pb use its family name and file list;
        other directories are grouped by each font's name table.
        """
        if self._families is not None:
            return self._families

        families: dict[str, list[Path]] = {}
        for directory in sorted(p for p in self.fonts_root.rglob("*") if p.is_dir()):
            font_files = sorted(
                p for p in directory.iterdir() if p.suffix.lower() in FONT_SUFFIXES
            )
            if not font_files:
                continue

            metadata = read_family_metadata(directory)
            if metadata is not None:
                name, listed = metadata
                families.setdefault(name, []).extend(listed or font_files)
                continue

            for font_path in font_files:
                name = self._family_from_name_table(font_path)
                if name:
                    families.setdefault(name, []).append(font_path)

        self._families = families
        logger.debug("Indexed families", count=len(families), root=str(self.fonts_root))
        return families

    def resolve(
        self, expression: str, family_filter: str | None = None
    ) -> list[tuple[str, Path]]:
        """Font files of every family with a tag matching the expression.

        Args:
            expression: Tag filter ("/a/b" hierarchy prefix, or a regex)
            family_filter: Optional regex; only families whose name matches
                are kept

        Returns:
            Sorted (family, font_path) pairs

        Raises:
            TagIndexError: If an expression is invalid or inputs are unreadable
        """
        try:
            family_re = re.compile(family_filter) if family_filter else None
        except re.error as e:
            raise TagIndexError(f"Invalid family filter {family_filter!r}: {e}") from e

        tagged = {t.family for t in self.tags() if tag_matches(t.tag, expression)}
        if family_re is not None:
            tagged = {f for f in tagged if family_re.search(f)}

        families = self.families()
        missing = sorted(tagged - families.keys())
        if missing:
            logger.info("Tagged families without fonts", count=len(missing), families=missing)

        return sorted(
            (family, font_path)
            for family in tagged & families.keys()
            for font_path in families[family]
        )

    def _family_from_name_table(self, font_path: Path) -> str | None:
        try:
            font = TTFont(str(font_path), lazy=True)
        except Exception as e:
            logger.warning("Unreadable font in fonts root", path=str(font_path), error=str(e))
            return None
        try:
            return font["name"].getBestFamilyName()  # type: ignore[attr-defined]
        finally:
            font.close()
