"""Rewriting exported image archives to carry additional templates.

An exported LXD image is a compressed tarball holding ``metadata.yaml``
next to the root filesystem. Templates are added by streaming every entry
into a new archive, holding back ``metadata.yaml``, and appending an
updated copy of it followed by one ``templates/<name>`` entry per
template. Entries are copied header and payload as they are, never
extracted, so device nodes and root-owned files in the image do not need
privileges to carry over.
"""

import gzip
import io
import logging
import posixpath
import shutil
import tarfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from lxdimage.errors import ArchiveFormatError
from lxdimage.models.template import Template


logger = logging.getLogger(__name__)

METADATA_NAME = "metadata.yaml"
TEMPLATES_DIR = "templates"
TEMPLATE_MODE = 0o644
GZIP_SUFFIX = ".gz"
DEFAULT_COMPRESSION_LEVEL = 6


@dataclass
class ExportedImage:
    """Image tarball written by an image export."""
    path: Path
    fingerprint: str


def fingerprint_from_filename(name: str) -> str:
    """Derive an image fingerprint from its export file name.

    ``lxc image export`` names the tarball ``<fingerprint>.tar.gz`` and does
    not report the fingerprint any other way.
    """
    return name.split(".", 1)[0]


def locate_export(directory: Path) -> ExportedImage:
    """Find the single tarball an image export wrote into ``directory``.

    Split images (separate metadata and rootfs tarballs) are not handled.
    """
    names = sorted(entry.name for entry in Path(directory).iterdir())
    if len(names) != 1:
        raise ArchiveFormatError(
            f"expected a single tarball, found {len(names)} ({', '.join(names)})"
        )

    name = names[0]
    return ExportedImage(
        path=Path(directory) / name,
        fingerprint=fingerprint_from_filename(name),
    )


def decompress(source: Path) -> Path:
    """Decompress ``source`` into a sibling file and return its path.

    The source file is left in place.
    """
    source = Path(source)
    if source.suffix != GZIP_SUFFIX:
        raise ArchiveFormatError(f"Unhandled compression type in tarball: {source.name}")

    target = source.with_suffix("")
    logger.debug(f"Decompressing {source.name}")
    try:
        with gzip.open(source, "rb") as fin, open(target, "wb") as fout:
            shutil.copyfileobj(fin, fout)
    except (gzip.BadGzipFile, EOFError) as e:
        target.unlink(missing_ok=True)
        raise ArchiveFormatError(f"decompressing {source.name}: {e}") from e

    return target


def rewrite_archive(
    source: Path,
    templates: Sequence[Template],
    output: Path,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> Path:
    """Write a copy of ``source`` to ``output`` with ``templates`` added.

    ``source`` is never modified, and a failed rewrite leaves no output
    file behind.
    """
    source = Path(source)
    output = Path(output)
    if output.resolve() in (source.resolve(), source.with_suffix("").resolve()):
        raise ValueError(f"refusing to overwrite {source} or its decompressed copy")

    intermediate = decompress(source)
    try:
        _write_rewritten(intermediate, templates, output, compression_level)
    except BaseException:
        output.unlink(missing_ok=True)
        raise
    finally:
        intermediate.unlink(missing_ok=True)

    logger.info(f"Wrote {output.name} with {len(templates)} template(s)")
    return output


def merge_templates(metadata: bytes, templates: Sequence[Template]) -> bytes:
    """Add ``templates`` to a metadata document's templates mapping.

    Templates are keyed by guest path; a template replaces any existing
    entry for the same path. A missing templates mapping is created.
    """
    yaml = _metadata_yaml()
    try:
        document = yaml.load(metadata.decode("utf-8"))
    except (UnicodeDecodeError, YAMLError) as e:
        raise ArchiveFormatError(f"parsing {METADATA_NAME}: {e}") from e

    if not isinstance(document, dict):
        raise ArchiveFormatError(f"{METADATA_NAME} is not a mapping")

    existing = document.get("templates")
    if existing is None:
        existing = document["templates"] = {}
    elif not isinstance(existing, dict):
        raise ArchiveFormatError(
            f"templates in {METADATA_NAME} is a {type(existing).__name__}, not a mapping"
        )

    for template in templates:
        existing[template.path] = template.metadata_entry()

    stream = io.StringIO()
    yaml.dump(document, stream)
    return stream.getvalue().encode("utf-8")


def _metadata_yaml() -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    return yaml


def _write_rewritten(
    tarball: Path,
    templates: Sequence[Template],
    output: Path,
    compression_level: int,
) -> None:
    # Exiting the with block closes the tar writer, then the compressor,
    # then the file.
    with open(output, "wb") as fout, \
            gzip.GzipFile(fileobj=fout, mode="wb", compresslevel=compression_level) as gzout, \
            tarfile.open(fileobj=gzout, mode="w|", format=tarfile.PAX_FORMAT) as out:
        metadata = _copy_entries(tarball, out)
        _add_entry(out, METADATA_NAME, merge_templates(metadata, templates))
        for template in templates:
            _add_entry(
                out,
                posixpath.join(TEMPLATES_DIR, template.template),
                template.content.encode("utf-8"),
            )


def _copy_entries(tarball: Path, out: tarfile.TarFile) -> bytes:
    """Copy every entry except metadata.yaml into ``out`` and return its contents."""
    metadata = None
    copied = 0
    try:
        with tarfile.open(tarball, mode="r|") as tar:
            for member in tar:
                if posixpath.normpath(member.name) == METADATA_NAME:
                    if metadata is not None:
                        raise ArchiveFormatError(
                            f"{tarball.name} contains more than one {METADATA_NAME}"
                        )
                    metadata = tar.extractfile(member).read()
                    continue

                payload = tar.extractfile(member) if member.isreg() else None
                out.addfile(member, payload)
                copied += 1
    except tarfile.TarError as e:
        raise ArchiveFormatError(f"reading {tarball.name}: {e}") from e

    if metadata is None:
        raise ArchiveFormatError(f"{METADATA_NAME} not found in {tarball.name}")

    logger.debug(f"Copied {copied} entries from {tarball.name}")
    return metadata


def _add_entry(out: tarfile.TarFile, name: str, payload: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.type = tarfile.REGTYPE
    info.size = len(payload)
    info.mode = TEMPLATE_MODE
    info.mtime = int(time.time())
    out.addfile(info, io.BytesIO(payload))
