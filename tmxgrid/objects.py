"""
Copyright (C) 2012-2023, Leif Theden <leif.theden@gmail.com>

This file is part of tmxgrid.

tmxgrid is free software: you can redistribute it and/or modify
it under the terms of the GNU Lesser General Public License as
published by the Free Software Foundation, either version 3 of the
License, or (at your option) any later version.

tmxgrid is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU Lesser General Public License for more details.

You should have received a copy of the GNU Lesser General Public
License along with tmxgrid.  If not, see <https://www.gnu.org/licenses/>.
"""
from __future__ import annotations

import logging
from collections import namedtuple
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Union

__all__ = (
    "EMPTY_TILE",
    "MAX_INDEXED_GID",
    "UNSET_GID",
    "Image",
    "Map",
    "Object",
    "ObjectGroup",
    "Orientation",
    "ParsingError",
    "Point",
    "SharedImage",
    "StaggerAxis",
    "Tile",
    "TileCollection",
    "TileSet",
    "Vector2",
)

logger = logging.getLogger(__name__)

# gid 0 is the absence of a tile
EMPTY_TILE = 0

# largest u32; a tileset without a firstgid sorts after every other one
UNSET_GID = 0xFFFFFFFF

# highest gid the dense index will hold; tilesets reaching past it are
# not indexed
MAX_INDEXED_GID = 1 << 20

# hexagonal grids overlap along the staggered axis
HEX_OVERLAP = 0.75

Point = namedtuple("Point", ["x", "y"])
Vector2 = namedtuple("Vector2", ["x", "y"])


class ParsingError(ValueError):
    """Raised when a string cannot be converted to a map value."""

    @classmethod
    def empty(cls) -> ParsingError:
        return cls("cannot parse from an empty string")

    @classmethod
    def invalid(cls, value: str) -> ParsingError:
        return cls("this string is invalid: {}".format(value))


class Orientation(Enum):
    ORTHOGONAL = "orthogonal"
    ISOMETRIC = "isometric"
    STAGGERED = "staggered"
    HEXAGONAL = "hexagonal"

    @classmethod
    def from_string(cls, value: str) -> Orientation:
        """Convert a TMX orientation name, ignoring case.

        Raises:
            ParsingError: if the name is empty or unknown.

        """
        text = str(value).strip()
        if not text:
            raise ParsingError.empty()
        try:
            return cls(text.lower())
        except ValueError:
            raise ParsingError.invalid(value) from None


class StaggerAxis(Enum):
    X = "x"
    Y = "y"
    NONE = "none"

    @classmethod
    def from_string(cls, value: str) -> StaggerAxis:
        """Convert a TMX stagger axis ("x" or "y"), ignoring case.

        Raises:
            ParsingError: if the name is empty or not an axis.

        """
        text = str(value).strip().lower()
        if not text:
            raise ParsingError.empty()
        if text == "x":
            return cls.X
        if text == "y":
            return cls.Y
        raise ParsingError.invalid(value)


@dataclass
class Image:
    source: str = ""
    width: int = 0
    height: int = 0


@dataclass
class Tile:
    id: int = 0
    image: Optional[Image] = None


@dataclass
class SharedImage:
    """Origin of a tileset where every tile is cut from one image"""

    image: Image


@dataclass
class TileCollection:
    """Origin of a tileset where each tile has its own image"""

    tiles: Dict[int, Tile] = field(default_factory=dict)

    @classmethod
    def new(cls, tile: Tile) -> TileCollection:
        return cls({tile.id: tile})

    @classmethod
    def from_tiles(cls, tiles: Iterable[Tile]) -> TileCollection:
        return cls({tile.id: tile for tile in tiles})

    def insert(self, tile: Tile) -> None:
        self.tiles[tile.id] = tile

    @property
    def last_id(self) -> int:
        return max(self.tiles, default=0)

    def __iter__(self) -> Iterator[Tile]:
        return (self.tiles[i] for i in sorted(self.tiles))

    def __len__(self) -> int:
        return len(self.tiles)


TileOrigin = Union[SharedImage, TileCollection, None]


@dataclass
class TileSet:
    firstgid: int = UNSET_GID
    tilewidth: int = 0
    tileheight: int = 0
    tilecount: int = 0
    columns: int = 0
    name: str = "unnamed"
    origin: TileOrigin = None

    @property
    def tile_size(self) -> Vector2:
        return Vector2(self.tilewidth, self.tileheight)

    @property
    def rows(self) -> int:
        """Number of rows of tiles in the tileset.

        Raises:
            ValueError: if the tileset has no columns.

        """
        if not self.columns:
            raise ValueError(
                'Tileset "{0}" has no columns, cannot compute rows'.format(self.name)
            )
        return self.tilecount // self.columns

    @property
    def last_local_id(self) -> int:
        """Highest local tile id of the tileset.

        A collection is authoritative even if it disagrees with tilecount.

        """
        if isinstance(self.origin, TileCollection):
            return self.origin.last_id
        if self.tilecount > 1:
            return self.tilecount - 1
        return 0

    @property
    def last_gid(self) -> int:
        return self.firstgid + self.last_local_id

    def insert_tile(self, tile: Tile) -> None:
        """Add a tile with its own image to the tileset.

        If the tileset is not already a collection, the current origin is
        replaced by a new collection holding only this tile.

        """
        if isinstance(self.origin, TileCollection):
            self.origin.insert(tile)
        else:
            self.origin = TileCollection.new(tile)


@dataclass
class Object:
    """Tiled object; free placement, not aligned on the grid

    Position and size are in whole pixels.
    """

    id: int = 0
    gid: int = EMPTY_TILE
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def coords(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Vector2:
        return Vector2(self.width, self.height)

    def valid_gid(self) -> Optional[int]:
        """Return the gid of the tile linked to this object, if any."""
        if self.gid == EMPTY_TILE:
            return None
        return self.gid


@dataclass
class ObjectGroup:
    id: int = 0
    name: str = ""
    objects: List[Object] = field(default_factory=list)

    def __iter__(self) -> Iterator[Object]:
        return iter(self.objects)


@dataclass
class Map:
    """Tiles, tilesets and objects of a Tiled map.

    Only decoders should modify the map.  Once ``normalize`` has run the
    tilesets are shared with the gid index and must be treated as
    read-only.

    """

    width: int = 0  # width of map in tiles
    height: int = 0  # height of map in tiles
    tilewidth: int = 0  # width of a tile in pixels
    tileheight: int = 0  # height of a tile in pixels
    orientation: Orientation = Orientation.ORTHOGONAL
    staggeraxis: StaggerAxis = StaggerAxis.NONE
    tiles: List[int] = field(default_factory=list)
    object_groups: List[ObjectGroup] = field(default_factory=list)
    tilesets: List[TileSet] = field(default_factory=list)
    gid_index: List[Optional[TileSet]] = field(default_factory=list, repr=False)

    @property
    def size(self) -> Vector2:
        return Vector2(self.width, self.height)

    @property
    def tile_size(self) -> Vector2:
        return Vector2(self.tilewidth, self.tileheight)

    @property
    def objects(self) -> Iterator[Object]:
        """Iterate over every object of every group, in document order."""
        for group in self.object_groups:
            yield from group

    # tilesets

    def add_tileset_without_reordering(self, tileset: TileSet) -> None:
        self.tilesets.append(tileset)

    def add_tileset(self, tileset: TileSet) -> None:
        """Add a tileset to the map and rebuild the gid index."""
        self.add_tileset_without_reordering(tileset)
        self.normalize()

    def add_tilesets(self, tilesets: Iterable[TileSet]) -> None:
        """Add several tilesets to the map and rebuild the gid index."""
        self.tilesets.extend(tilesets)
        self.normalize()

    def last_tileset(self) -> Optional[TileSet]:
        if self.tilesets:
            return self.tilesets[-1]
        return None

    def normalize(self) -> None:
        """Sort the tilesets by firstgid and build the gid index.

        The index is dense: slot ``n`` holds the tileset owning gid ``n``,
        or None.  Slot 0 is always None.  Gaps between tilesets are padded
        with None.

        Tilesets without a usable firstgid, or reaching past
        MAX_INDEXED_GID, are kept but not indexed.  When ranges overlap,
        the earlier tileset keeps the shared gids.

        """
        self.tilesets.sort(key=lambda ts: ts.firstgid)

        index: List[Optional[TileSet]] = [None]
        last_gid = 0

        for tileset in self.tilesets:
            if tileset.firstgid == UNSET_GID or tileset.firstgid < 1:
                logger.warning(
                    'Tileset "%s" has no valid firstgid (%s), not indexed',
                    tileset.name,
                    tileset.firstgid,
                )
                continue

            if tileset.last_gid > MAX_INDEXED_GID:
                logger.warning(
                    'Tileset "%s" reaches gid %d, past the limit %d, not indexed',
                    tileset.name,
                    tileset.last_gid,
                    MAX_INDEXED_GID,
                )
                continue

            first = tileset.firstgid
            if first <= last_gid:
                logger.warning(
                    'Tileset "%s" overlaps gids %d-%d of the previous tileset',
                    tileset.name,
                    first,
                    min(last_gid, tileset.last_gid),
                )
                first = last_gid + 1

            # pad the gap between the previous tileset and this one
            index.extend([None] * (first - 1 - last_gid))
            index.extend([tileset] * (tileset.last_gid - first + 1))
            last_gid = max(last_gid, tileset.last_gid)

        self.gid_index = index

    def tileset_for(self, gid: int) -> Optional[TileSet]:
        """Return the tileset that owns the gid.

        Args:
            gid (int): Global tile id.

        Returns:
            Optional[TileSet]: The tileset, or None for gid 0, gaps and
            gids past the last tileset.

        """
        if gid < 1:
            return None
        try:
            return self.gid_index[gid]
        except IndexError:
            return None

    get_tileset = tileset_for

    # grid coordinates

    def _check_width(self) -> None:
        if not self.width:
            raise ValueError("Map width is 0, tile indexes cannot be resolved")

    def tile_column(self, tile: int) -> int:
        self._check_width()
        return tile % self.width

    def tile_row(self, tile: int) -> int:
        self._check_width()
        return tile // self.width

    def tile_to_grid_coords(self, tile: int) -> Point:
        """Return the (column, row) of a tile index, in row-major order."""
        return Point(self.tile_column(tile), self.tile_row(tile))

    tile_index_to_coords = tile_to_grid_coords

    def tile_id(self, coords: Point) -> int:
        x, y = coords
        return x + y * self.width

    def tile_gid(self, coords: Point) -> int:
        """Return the gid at the grid coordinates.

        Layer data may be shorter than the grid; missing tiles are empty.

        """
        tile = self.tile_id(coords)
        if 0 <= tile < len(self.tiles):
            return self.tiles[tile]
        return EMPTY_TILE

    # world coordinates

    def coords_stagger_axis(self, coords: Point) -> StaggerAxis:
        """Return the stagger axis that applies to the tile at coords.

        Only odd columns (X axis) or odd rows (Y axis) are staggered.

        """
        x, y = coords
        if self.staggeraxis is StaggerAxis.X and x % 2 == 1:
            return StaggerAxis.X
        if self.staggeraxis is StaggerAxis.Y and y % 2 == 1:
            return StaggerAxis.Y
        return StaggerAxis.NONE

    def tile_stagger_axis(self, tile: int) -> StaggerAxis:
        return self.coords_stagger_axis(self.tile_to_grid_coords(tile))

    def grid_coords_to_world(self, coords: Point) -> Point:
        """Convert grid coordinates to world coordinates.

        The result is the center of the tile, relative to the position of
        the map in the world.  World y grows upward, so rows go negative.

        Args:
            coords (Point): Column and row of the tile.

        Returns:
            Point: World position as floats.

        """
        width = float(self.tilewidth)
        height = float(self.tileheight)

        mx, my = width, height
        if self.orientation is Orientation.HEXAGONAL:
            if self.staggeraxis is StaggerAxis.X:
                mx = width * HEX_OVERLAP
            elif self.staggeraxis is StaggerAxis.Y:
                my = height * HEX_OVERLAP

        col, row = coords
        x = float(col) * mx
        y = -float(row) * my

        axis = self.coords_stagger_axis(coords)
        if axis is StaggerAxis.X:
            x += width / 2.0
            y -= height
        elif axis is StaggerAxis.Y:
            x += width
            y -= height / 2.0
        else:
            x += width / 2.0
            y -= height / 2.0

        return Point(x, y)

    def tile_world_coords(self, tile: int) -> Point:
        """Return the world position of the center of a tile index."""
        return self.grid_coords_to_world(self.tile_to_grid_coords(tile))
