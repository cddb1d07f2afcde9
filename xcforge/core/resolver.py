"""Archive product resolver.

Product names inside an archive are not guaranteed to match the scheme
that produced it, so resolution degrades step by step instead of
failing:

1. frameworks directory unreadable  -> naive ``<name>.framework`` guess
2. no product entries               -> naive guess
3. exactly one product entry        -> that entry, whatever its name
4. ``<name>.framework`` present      -> exact match
5. ``<sanitized>.framework`` present -> heuristic match
6. otherwise                        -> lexicographically first entry

Every fallback is logged as a warning; the resolver itself never fails.
Whether the returned path exists is the caller's concern.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from xcforge.core.log_emitter import LogEmitter
from xcforge.core.sanitizer import sanitize_for_product_match

FRAMEWORKS_SUBPATH = PurePosixPath("Products/Library/Frameworks")


class ArchiveProductResolver:
    """Finds the built product inside an archive directory tree.

    Parameters
    ----------
    emitter:
        Receives the decision narration and fallback warnings.
    archive_extension:
        Extension the toolchain appends to ``-archivePath``.
    product_extension:
        Extension of candidate product entries.
    """

    def __init__(
        self,
        emitter: LogEmitter,
        archive_extension: str = "xcarchive",
        product_extension: str = "framework",
    ) -> None:
        self._emitter = emitter
        self.archive_extension = archive_extension
        self.product_extension = product_extension

    def frameworks_dir(self, archive_root: str | PurePosixPath) -> str:
        """Relative frameworks directory of the archive at *archive_root*."""
        archive = f"{archive_root}.{self.archive_extension}"
        return str(PurePosixPath(archive) / FRAMEWORKS_SUBPATH)

    def list_products(self, frameworks_dir: Path) -> list[str]:
        """Names of product-suffixed entries; raises ``OSError`` if unlistable."""
        suffix = f".{self.product_extension}"
        return [
            entry.name
            for entry in frameworks_dir.iterdir()
            if entry.name.endswith(suffix)
        ]

    def resolve(
        self,
        archive_root: str | PurePosixPath,
        expected_product_name: str,
        base_directory: Path,
    ) -> str:
        """Return the product path relative to *base_directory*."""
        frameworks_rel = self.frameworks_dir(archive_root)
        naive = f"{frameworks_rel}/{expected_product_name}.{self.product_extension}"

        try:
            products = self.list_products(Path(base_directory) / frameworks_rel)
        except OSError:
            self._emitter.warning(
                f"Could not list frameworks directory ({frameworks_rel}); "
                f"defaulting to scheme name"
            )
            return naive

        if not products:
            self._emitter.warning(
                f"No .{self.product_extension} entries found in {frameworks_rel}; "
                f"defaulting to scheme name"
            )
            return naive

        if len(products) == 1:
            only = products[0]
            self._emitter.info(
                f"Found single framework '{only}' in archive for scheme "
                f"'{expected_product_name}'"
            )
            return f"{frameworks_rel}/{only}"

        exact = f"{expected_product_name}.{self.product_extension}"
        if exact in products:
            self._emitter.info(
                f"Using exact match framework '{exact}' for scheme "
                f"'{expected_product_name}'"
            )
            return f"{frameworks_rel}/{exact}"

        sanitized = sanitize_for_product_match(expected_product_name)
        candidate = f"{sanitized}.{self.product_extension}"
        if candidate in products:
            self._emitter.info(
                f"Using sanitized match framework '{candidate}' for scheme "
                f"'{expected_product_name}' (sanitized value: '{sanitized}')"
            )
            return f"{frameworks_rel}/{candidate}"

        ordered = sorted(products)
        chosen = ordered[0]
        self._emitter.warning(
            f"Multiple frameworks found ({', '.join(ordered)}); none matched "
            f"scheme '{expected_product_name}'. Using '{chosen}'."
        )
        return f"{frameworks_rel}/{chosen}"
