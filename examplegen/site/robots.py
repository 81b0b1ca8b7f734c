"""robots.txt variants for public and staging hosts."""

from __future__ import annotations

from pathlib import Path

ROBOTS_ALLOW = "User-Agent: *\nDisallow: \n"
ROBOTS_DISALLOW = "User-Agent: *\nDisallow: /\n"


def write_robots(dest: Path, *, allow: bool) -> Path:
    dest.mkdir(parents=True, exist_ok=True)
    target = dest / "robots.txt"
    target.write_text(ROBOTS_ALLOW if allow else ROBOTS_DISALLOW, encoding="utf-8")
    return target


__all__ = ["ROBOTS_ALLOW", "ROBOTS_DISALLOW", "write_robots"]
