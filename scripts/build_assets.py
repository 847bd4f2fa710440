#!/usr/bin/env python3
"""
Build the static website into ``dist/`` with cache-busted asset names.

CSS and JS files are copied as ``<name>.<hash><ext>``, HTML pages are
rewritten to reference the hashed copies and minified, and an ``.htaccess``
with caching, compression and security rules is generated.

Example:
    python scripts/build_assets.py
    python scripts/build_assets.py --src src --dist dist
"""

from __future__ import annotations

import argparse
import hashlib
import re
import shutil
import sys
from pathlib import Path
from typing import Optional, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
DIST_DIR = REPO_ROOT / "dist"

CSS_FILES = ["main.css", "bootstrap.min.css"]
JS_FILES = ["main.js", "bootstrap.min.js"]
STATIC_FILES = ["robots.txt", "sitemap.xml"]
ASSET_DIRS = ["assets/css", "assets/js", "assets/images", "assets/favicons"]

AssetMap = dict[str, str]

PRESERVED_BLOCK_RE = re.compile(
    r"(<(pre|textarea|script|style)\b[^>]*>.*?</\2\s*>)",
    re.IGNORECASE | re.DOTALL,
)
COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
WHITESPACE_RE = re.compile(r"\s+")
INTER_TAG_RE = re.compile(r">\s+<")

HTACCESS = """
# Enable compression
<IfModule mod_deflate.c>
    AddOutputFilterByType DEFLATE text/plain
    AddOutputFilterByType DEFLATE text/html
    AddOutputFilterByType DEFLATE text/xml
    AddOutputFilterByType DEFLATE text/css
    AddOutputFilterByType DEFLATE application/xml
    AddOutputFilterByType DEFLATE application/xhtml+xml
    AddOutputFilterByType DEFLATE application/rss+xml
    AddOutputFilterByType DEFLATE application/javascript
    AddOutputFilterByType DEFLATE application/x-javascript
</IfModule>

# Leverage browser caching
<IfModule mod_expires.c>
    ExpiresActive on

    # Cache hashed assets for 1 year
    ExpiresByType text/css "access plus 1 year"
    ExpiresByType application/javascript "access plus 1 year"
    ExpiresByType image/png "access plus 1 year"
    ExpiresByType image/jpg "access plus 1 year"
    ExpiresByType image/jpeg "access plus 1 year"
    ExpiresByType image/gif "access plus 1 year"
    ExpiresByType image/svg+xml "access plus 1 year"

    # Cache HTML for 1 day
    ExpiresByType text/html "access plus 1 day"

    # Cache XML files for 1 day
    ExpiresByType application/xml "access plus 1 day"
    ExpiresByType text/xml "access plus 1 day"
</IfModule>

# Security headers
<IfModule mod_headers.c>
    Header always set X-Content-Type-Options nosniff
    Header always set X-Frame-Options DENY
    Header always set X-XSS-Protection "1; mode=block"
    Header always set Referrer-Policy "strict-origin-when-cross-origin"
    Header always set Permissions-Policy "accelerometer=(), camera=(), geolocation=(), gyroscope=(), magnetometer=(), microphone=(), payment=(), usb=()"
</IfModule>

# Redirect to HTTPS
<IfModule mod_rewrite.c>
    RewriteEngine On
    RewriteCond %{HTTPS} off
    RewriteRule ^(.*)$ https://%{HTTP_HOST}%{REQUEST_URI} [L,R=301]
</IfModule>
""".strip()


def content_hash(data: bytes) -> str:
    """First 8 hex characters of the MD5 digest of ``data``."""
    return hashlib.md5(data).hexdigest()[:8]


def hashed_name(filename: str, digest: str) -> str:
    path = Path(filename)
    return f"{path.stem}.{digest}{path.suffix}"


def ensure_dirs(dist_dir: Path) -> None:
    for rel in ASSET_DIRS:
        (dist_dir / rel).mkdir(parents=True, exist_ok=True)


def publish_asset(source: Path, dest_dir: Path, assets_root: Path) -> str:
    """Copy ``source`` under its content-hashed name and return its URL path."""
    content = source.read_bytes()
    target = dest_dir / hashed_name(source.name, content_hash(content))
    dest_dir.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
    print(f"[asset] {source.name} -> {target.name}")
    return "/assets/" + target.relative_to(assets_root).as_posix()


def _process_group(src_dir: Path, dist_dir: Path, kind: str, files: Sequence[str]) -> AssetMap:
    asset_map: AssetMap = {}
    assets_root = dist_dir / "assets"
    for name in files:
        source = src_dir / kind / name
        if not source.exists():
            continue
        asset_map[f"/{kind}/{name}"] = publish_asset(source, assets_root / kind, assets_root)
    return asset_map


def process_css(src_dir: Path, dist_dir: Path) -> AssetMap:
    print("[build] processing CSS files")
    return _process_group(src_dir, dist_dir, "css", CSS_FILES)


def process_js(src_dir: Path, dist_dir: Path) -> AssetMap:
    print("[build] processing JavaScript files")
    return _process_group(src_dir, dist_dir, "js", JS_FILES)


def copy_static_files(src_dir: Path, dist_dir: Path) -> list[Path]:
    print("[build] copying static files")
    copied: list[Path] = []
    for name in STATIC_FILES:
        source = src_dir / name
        if not source.exists():
            continue
        target = dist_dir / name
        shutil.copyfile(source, target)
        copied.append(target)
        print(f"[static] {name}")
    return copied


def rewrite_references(html: str, asset_map: AssetMap) -> str:
    """Replace every literal occurrence of each logical path with its hashed path.

    All paths are matched by one alternation in a single pass, so the result
    does not depend on the map's order and replaced text is never rescanned.
    """
    if not asset_map:
        return html
    keys = sorted(asset_map, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(key) for key in keys))
    return pattern.sub(lambda match: asset_map[match.group(0)], html)


def _compact(fragment: str) -> str:
    fragment = WHITESPACE_RE.sub(" ", fragment)
    return INTER_TAG_RE.sub("><", fragment)


def minify_html(html: str) -> str:
    """Strip comments and collapse whitespace outside pre/textarea/script/style blocks."""
    html = COMMENT_RE.sub("", html)
    parts = PRESERVED_BLOCK_RE.split(html)
    # split() yields [text, block, tag name, text, block, tag name, ..., text]
    output: list[str] = []
    for index in range(0, len(parts), 3):
        text = _compact(parts[index])
        # blocks begin and end with a tag, so whitespace touching them sits between tags
        head = text.lstrip()
        if index > 0 and (not head or head.startswith("<")):
            text = head
        tail = text.rstrip()
        if index + 1 < len(parts) and (not tail or tail.endswith(">")):
            text = tail
        output.append(text)
        if index + 1 < len(parts):
            output.append(parts[index + 1])
    return "".join(output).strip()


def process_html(src_dir: Path, dist_dir: Path, asset_map: AssetMap) -> list[Path]:
    print("[build] processing HTML files")
    written: list[Path] = []
    for source in sorted(src_dir.glob("*.html")):
        content = source.read_text(encoding="utf-8")
        content = minify_html(rewrite_references(content, asset_map))
        target = dist_dir / source.name
        target.write_text(content, encoding="utf-8")
        written.append(target)
        print(f"[html] {source.name}")
    return written


def generate_htaccess(dist_dir: Path) -> Path:
    target = dist_dir / ".htaccess"
    target.write_text(HTACCESS, encoding="utf-8")
    print("[build] .htaccess")
    return target


def build(src_dir: Path = SRC_DIR, dist_dir: Path = DIST_DIR) -> AssetMap:
    """Run the whole build and return the logical -> hashed asset map."""
    print(f"[build] {src_dir} -> {dist_dir}")
    ensure_dirs(dist_dir)
    asset_map: AssetMap = {}
    asset_map.update(process_css(src_dir, dist_dir))
    asset_map.update(process_js(src_dir, dist_dir))
    copy_static_files(src_dir, dist_dir)
    process_html(src_dir, dist_dir, asset_map)
    generate_htaccess(dist_dir)
    return asset_map


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Build the static website with cache-busted assets")
    parser.add_argument("--src", type=Path, default=SRC_DIR, help="Source directory")
    parser.add_argument("--dist", type=Path, default=DIST_DIR, help="Output directory")
    args = parser.parse_args(argv)

    if not args.src.is_dir():
        raise SystemExit(f"source directory not found: {args.src}")

    try:
        build(args.src, args.dist)
    except OSError as exc:
        print(f"[error] build failed: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"[done] output directory: {args.dist}")


if __name__ == "__main__":
    main()
