"""Fixed asset set of a pool."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from ammpool.constants import MIN_ASSETS, NATIVE_ASSET
from ammpool.errors import InvalidConfiguration, InvalidInput


def normalize_asset(asset: str) -> str:
    """Normalize an asset identifier for comparison.

    Hex addresses compare case-insensitively; other identifiers are kept as-is.
    """
    if asset.startswith(("0x", "0X")):
        return asset.lower()
    return asset


class AssetSet:
    """Ordered, immutable list of the assets a pool supports.

    Invariants (checked at construction):
    - at least MIN_ASSETS entries
    - at most one native-currency sentinel
    - no duplicates, since each entry owns one reserve slot
    """

    __slots__ = ("_assets", "_index", "_native_index")

    def __init__(self, assets: Iterable[str]) -> None:
        normalized = tuple(normalize_asset(a) for a in assets)

        if len(normalized) < MIN_ASSETS:
            raise InvalidConfiguration(
                f"Pool needs at least {MIN_ASSETS} assets, got {len(normalized)}"
            )

        native_count = sum(1 for a in normalized if a == NATIVE_ASSET)
        if native_count > 1:
            raise InvalidConfiguration(
                f"At most one native asset allowed, got {native_count}"
            )

        index: dict[str, int] = {}
        for i, asset in enumerate(normalized):
            if asset in index:
                raise InvalidConfiguration(f"Duplicate asset {asset} at index {i}")
            index[asset] = i

        self._assets = normalized
        self._index = index
        self._native_index = index.get(NATIVE_ASSET)

    @property
    def count(self) -> int:
        return len(self._assets)

    @property
    def native_index(self) -> int | None:
        """Index of the native-currency sentinel, or None if the pool has none."""
        return self._native_index

    def __len__(self) -> int:
        return len(self._assets)

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __getitem__(self, index: int) -> str:
        if not self.is_valid_index(index):
            raise InvalidInput(f"Asset index {index} out of range [0, {self.count})")
        return self._assets[index]

    def __contains__(self, asset: object) -> bool:
        return isinstance(asset, str) and normalize_asset(asset) in self._index

    def is_valid_index(self, index: int) -> bool:
        """True if index addresses an asset (0 <= index < count)."""
        return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < self.count

    def index_of(self, asset: str) -> int:
        """Position of an asset in the set.

        Raises:
            InvalidInput: If the asset is not in the pool
        """
        try:
            return self._index[normalize_asset(asset)]
        except KeyError:
            raise InvalidInput(f"Asset {asset} not in pool") from None

    def is_native(self, index: int) -> bool:
        return index == self._native_index

    def as_tuple(self) -> tuple[str, ...]:
        return self._assets

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssetSet):
            return NotImplemented
        return self._assets == other._assets

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"AssetSet({list(self._assets)!r})"


def check_amounts_length(assets: AssetSet, amounts: Sequence[int]) -> None:
    """Require one non-negative integer amount per asset.

    Raises:
        InvalidInput: On length mismatch or a negative / non-integer amount
    """
    if len(amounts) != assets.count:
        raise InvalidInput(f"Expected {assets.count} amounts, got {len(amounts)}")
    for i, amount in enumerate(amounts):
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise InvalidInput(f"Amount at index {i} must be a non-negative integer: {amount!r}")
