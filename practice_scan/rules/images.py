"""Image optimization rule suite."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from practice_scan.rules.base import (
    Evidence,
    GraduatedThreshold,
    Informational,
    Rule,
    ScanContext,
)
from practice_scan.rules.detectors import (
    AllOf,
    AnyOf,
    DependencyDetector,
    FileCountDetector,
    FileExistsDetector,
    PatternDetector,
)
from practice_scan.scanner import WalkSelector, locate, relative_posix

logger = logging.getLogger(__name__)

IMAGE_FORMATS = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".png": "png",
    ".gif": "gif",
    ".webp": "webp",
    ".avif": "avif",
    ".svg": "svg",
}
FORMAT_LABELS = {
    "jpeg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "webp": "WebP",
    "avif": "AVIF",
    "svg": "SVG",
}
IMAGE_FILES = WalkSelector(tuple(IMAGE_FORMATS))
MARKUP_SOURCES = WalkSelector((".tsx", ".jsx", ".html"), base="src")
SCRIPT_SOURCES = WalkSelector((".tsx", ".jsx", ".js"), base="src")


@dataclass(frozen=True, slots=True)
class ImageInventory:
    """Image files below the project root, broken down by format."""

    paths: tuple[str, ...]
    by_format: dict[str, int]
    total_bytes: int

    @property
    def total(self) -> int:
        return len(self.paths)

    def describe(self) -> str:
        formats = " | ".join(
            f"{label}: {self.by_format[key]}" for key, label in FORMAT_LABELS.items()
        )
        return f"{self.total} images ({formats}), total size {_format_size(self.total_bytes)}"


def take_inventory(root: Path, context: ScanContext) -> ImageInventory:
    """Count image files per format and sum their sizes."""
    by_format = dict.fromkeys(FORMAT_LABELS, 0)
    total_bytes = 0
    paths: list[str] = []
    for path in locate(root, IMAGE_FILES, exclude_dirs=context.exclude_dirs):
        by_format[IMAGE_FORMATS[path.suffix.lower()]] += 1
        try:
            total_bytes += path.stat().st_size
        except OSError as exc:
            logger.debug("Could not size image %s: %s", path, exc)
        paths.append(relative_posix(root, path))
    return ImageInventory(paths=tuple(paths), by_format=by_format, total_bytes=total_bytes)


@dataclass(frozen=True, slots=True)
class ImageInventoryDetector:
    """Evidence is the image count; the detail carries the per-format breakdown."""

    def detect(self, root: Path, context: ScanContext) -> Evidence:
        inventory = take_inventory(root, context)
        return Evidence(
            count=inventory.total,
            matched_paths=inventory.paths,
            detail=inventory.describe(),
        )


def image_section(
    root: Path, context: ScanContext, evidence: dict[str, Evidence]
) -> dict[str, Any]:
    """Build the report's ``images`` block from a fresh inventory and rule evidence."""
    inventory = take_inventory(root, context)

    def count(rule_id: str) -> int:
        found = evidence.get(rule_id)
        return found.count if found is not None else 0

    return {
        "total": inventory.total,
        **inventory.by_format,
        "total_bytes": inventory.total_bytes,
        "with_srcset": count("srcset"),
        "lazy_loaded": count("lazy_loading"),
        "responsive": count("picture_element"),
    }


def image_section_lines(section: dict[str, Any]) -> list[str]:
    return [
        f"Total images: {section['total']}",
        f"WebP: {section['webp']} | AVIF: {section['avif']}",
        f"Responsive (srcset): {section['with_srcset']}",
        f"Lazy-loaded: {section['lazy_loaded']}",
    ]


def _format_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.1f}MB"
    return f"{size / 1024:.1f}KB"


def image_rules() -> list[Rule]:
    """Return the image optimization checks in report order."""
    return [
        Rule(
            rule_id="image_inventory",
            description="Project image inventory",
            detector=ImageInventoryDetector(),
            classification=Informational(),
            recommendation="Watch total image weight as the project grows.",
        ),
        Rule(
            rule_id="webp_support",
            description="WebP format usage",
            detector=AllOf(
                (
                    FileCountDetector(WalkSelector((".webp",))),
                    PatternDetector(MARKUP_SOURCES, (r"\.webp", r"image/webp", r"<picture")),
                )
            ),
            issue="WebP format not properly utilized",
            recommendation="Ship .webp variants and reference them from markup.",
        ),
        Rule(
            rule_id="avif_support",
            description="AVIF format usage",
            detector=AllOf(
                (
                    FileCountDetector(WalkSelector((".avif",))),
                    PatternDetector(MARKUP_SOURCES, (r"\.avif", r"image/avif")),
                )
            ),
            issue="AVIF format not implemented",
            recommendation="Use AVIF for maximum compression with a WebP fallback.",
        ),
        Rule(
            rule_id="srcset",
            description="Responsive images with srcset",
            detector=PatternDetector(MARKUP_SOURCES, (r"srcset", r"srcSet")),
            issue="Responsive images (srcset) not implemented",
            recommendation="Use srcset and sizes for responsive image serving.",
        ),
        Rule(
            rule_id="lazy_loading",
            description="Lazy loading implementation",
            detector=AnyOf(
                (
                    PatternDetector(MARKUP_SOURCES, (r"""loading=["']lazy["']""",)),
                    PatternDetector(
                        SCRIPT_SOURCES,
                        (r"lazyload", r"react-lazyload", r"lozad", r"IntersectionObserver"),
                    ),
                )
            ),
            classification=GraduatedThreshold(good=2),
            issue="Lazy loading not implemented",
            recommendation='Use loading="lazy" or IntersectionObserver for offscreen images.',
        ),
        Rule(
            rule_id="compression",
            description="Image compression tooling",
            detector=AnyOf(
                (
                    DependencyDetector(("sharp", "imagemin", "image-compress")),
                    FileExistsDetector(
                        (".github/workflows/optimize-images.yml", "scripts/compress-images.sh")
                    ),
                )
            ),
            issue="Automatic image compression not configured",
            recommendation="Use sharp or imagemin for automated optimization.",
        ),
        Rule(
            rule_id="dimensions",
            description="Explicit image dimensions",
            detector=PatternDetector(MARKUP_SOURCES, (r"<img[^>]*\b(width|height)=",)),
            issue="Image dimensions not properly specified",
            recommendation="Add width/height or aspect-ratio to prevent layout shift.",
        ),
        Rule(
            rule_id="picture_element",
            description="Picture element for format fallbacks",
            detector=PatternDetector(MARKUP_SOURCES, (r"<picture",)),
            issue="Picture element not used for format fallbacks",
            recommendation="Use <picture> for AVIF -> WebP -> fallback format chains.",
        ),
    ]
