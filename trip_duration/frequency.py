"""Location popularity counts shared by train and test partitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import polars as pl

logger = logging.getLogger("TripDurationPipeline")

_KEYS = ("longitude", "latitude")

LOCATION_COLUMNS: dict[str, tuple[str, str]] = {
    "pickup": ("pickup_longitude", "pickup_latitude"),
    "dropoff": ("dropoff_longitude", "dropoff_latitude"),
}


def _count_locations(frames: list[pl.DataFrame], kind: str) -> pl.DataFrame:
    lon_col, lat_col = LOCATION_COLUMNS[kind]
    coords = pl.concat(
        [df.select(pl.col(lon_col).alias("longitude"), pl.col(lat_col).alias("latitude")) for df in frames],
        how="vertical_relaxed",
    )
    return (
        coords.group_by(list(_KEYS))
        .agg(pl.len().cast(pl.Int64).alias(f"{kind}_location_frequency"))
        .sort(list(_KEYS))
    )


@dataclass(frozen=True)
class LocationFrequencyTable:
    """Occurrence counts per exact (longitude, latitude) pair.

    Built once from the combined train+test population and then joined onto
    each partition. Keys compare by exact float equality: two coordinates that
    differ in the last bit are different locations. Keep the instance produced
    at training time and pass it to inference runs, since recounting over
    unseen data alone changes every frequency.

    Args:
        pickup: ``longitude, latitude, pickup_location_frequency`` rows.
        dropoff: ``longitude, latitude, dropoff_location_frequency`` rows.
    """

    pickup: pl.DataFrame
    dropoff: pl.DataFrame

    @classmethod
    def build(cls, *partitions: pl.DataFrame) -> LocationFrequencyTable:
        """Count pickup and dropoff locations over the union of ``partitions``.

        Args:
            partitions: Frames with the four raw coordinate columns, typically
                train and test.

        Returns:
            Table ready to be attached to any partition.
        """
        frames = list(partitions)
        table = cls(
            pickup=_count_locations(frames, "pickup"),
            dropoff=_count_locations(frames, "dropoff"),
        )
        logger.info(
            "Location frequency table: %d pickup / %d dropoff distinct locations from %d rows",
            table.pickup.height,
            table.dropoff.height,
            sum(df.height for df in frames),
        )
        return table

    def attach(self, df: pl.DataFrame) -> pl.DataFrame:
        """Left-join both frequency columns onto ``df``.

        Row order and row count are preserved; locations missing from the
        table get frequency 0.

        Args:
            df: Partition with the four raw coordinate columns.

        Returns:
            New DataFrame with ``pickup_location_frequency`` and
            ``dropoff_location_frequency`` appended.
        """
        out = df.with_row_index("_row")
        for kind, counts in (("pickup", self.pickup), ("dropoff", self.dropoff)):
            lon_col, lat_col = LOCATION_COLUMNS[kind]
            out = out.join(
                counts,
                left_on=[lon_col, lat_col],
                right_on=list(_KEYS),
                how="left",
            )
        out = out.sort("_row").drop("_row").with_columns(
            pl.col("pickup_location_frequency").fill_null(0),
            pl.col("dropoff_location_frequency").fill_null(0),
        )
        if out.height != df.height:
            raise RuntimeError(
                f"Frequency join changed row count: {df.height} -> {out.height}"
            )
        return out

    def lookup(self, kind: str, longitude: float, latitude: float) -> int:
        """Frequency of a single location, 0 when unseen.

        Args:
            kind: ``"pickup"`` or ``"dropoff"``.
            longitude: Exact longitude key.
            latitude: Exact latitude key.
        """
        if kind not in LOCATION_COLUMNS:
            raise ValueError(f"kind must be 'pickup' or 'dropoff' (got {kind!r})")
        counts = self.pickup if kind == "pickup" else self.dropoff
        match = counts.filter(
            (pl.col("longitude") == longitude) & (pl.col("latitude") == latitude)
        )
        if match.height == 0:
            return 0
        return int(match.item(0, f"{kind}_location_frequency"))
