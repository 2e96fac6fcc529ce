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

Where in a TMX document the decoder currently is.

Each scope owns the entities that are still being filled in.  ``enter``
and ``leave`` consume a scope and return a new one, so an entity always
has exactly one owner: when a scope closes, its entity is handed to the
parent scope instead of being copied.

    >>> state = enter(AtDocument(), "map")
    >>> state = enter(state, "tileset")
    >>> state, tileset = leave(state)

"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from tmxgrid.errors import TmxDecodeError
from tmxgrid.objects import Image, Object, ObjectGroup, Tile, TileSet

logger = logging.getLogger(__name__)

MAP_TAG = "map"
TILESET_TAG = "tileset"
IMAGE_TAG = "image"
TILE_TAG = "tile"
GRID_TAG = "grid"
LAYER_TAG = "layer"
DATA_TAG = "data"
OBJECTGROUP_TAG = "objectgroup"
OBJECT_TAG = "object"


@dataclass
class AtDocument:
    """Outside of the root <map>"""


@dataclass
class AtMap:
    pass


@dataclass
class InTileSet:
    tileset: TileSet


@dataclass
class InTileSetImage:
    tileset: TileSet
    image: Image


@dataclass
class InGrid:
    tileset: TileSet


@dataclass
class InTile:
    tileset: TileSet
    tile: Tile


@dataclass
class InTileImage:
    tileset: TileSet
    tile: Tile
    image: Image


@dataclass
class InLayer:
    pass


@dataclass
class InLayerData:
    pass


@dataclass
class InObjectGroup:
    group: ObjectGroup


@dataclass
class InObject:
    group: ObjectGroup
    obj: Object


@dataclass
class InUnknown:
    """Unrecognized tag; its subtree is skipped"""

    parent: Any
    tag: str = None


# (current scope, child tag) -> child scope
transitions = {
    (AtDocument, MAP_TAG): lambda s: AtMap(),
    (AtMap, TILESET_TAG): lambda s: InTileSet(TileSet()),
    (AtMap, LAYER_TAG): lambda s: InLayer(),
    (AtMap, OBJECTGROUP_TAG): lambda s: InObjectGroup(ObjectGroup()),
    (InTileSet, IMAGE_TAG): lambda s: InTileSetImage(s.tileset, Image()),
    (InTileSet, TILE_TAG): lambda s: InTile(s.tileset, Tile()),
    (InTileSet, GRID_TAG): lambda s: InGrid(s.tileset),
    (InTile, IMAGE_TAG): lambda s: InTileImage(s.tileset, s.tile, Image()),
    (InLayer, DATA_TAG): lambda s: InLayerData(),
    (InObjectGroup, OBJECT_TAG): lambda s: InObject(s.group, Object()),
}

# child scope -> (parent scope, entity released to the parent)
parents = {
    AtMap: lambda s: (AtDocument(), None),
    InTileSet: lambda s: (AtMap(), s.tileset),
    InTileSetImage: lambda s: (InTileSet(s.tileset), s.image),
    InGrid: lambda s: (InTileSet(s.tileset), None),
    InTile: lambda s: (InTileSet(s.tileset), s.tile),
    InTileImage: lambda s: (InTile(s.tileset, s.tile), s.image),
    InLayer: lambda s: (AtMap(), None),
    InLayerData: lambda s: (InLayer(), None),
    InObjectGroup: lambda s: (AtMap(), s.group),
    InObject: lambda s: (InObjectGroup(s.group), s.obj),
    InUnknown: lambda s: (s.parent, None),
}

# scope -> tag that opened it
scope_tags = {
    AtMap: MAP_TAG,
    InTileSet: TILESET_TAG,
    InTileSetImage: IMAGE_TAG,
    InGrid: GRID_TAG,
    InTile: TILE_TAG,
    InTileImage: IMAGE_TAG,
    InLayer: LAYER_TAG,
    InLayerData: DATA_TAG,
    InObjectGroup: OBJECTGROUP_TAG,
    InObject: OBJECT_TAG,
}


def enter(state, name: str):
    """Return the scope of the child tag ``name`` opened inside ``state``.

    Unknown tags never fail: they wrap the current scope in InUnknown,
    which ``leave`` unwraps again.

    """
    try:
        child = transitions[(type(state), name)]
    except KeyError:
        logger.debug("ignoring <%s> in %s", name, type(state).__name__)
        return InUnknown(state, name)
    return child(state)


def leave(state) -> Tuple[Any, Any]:
    """Close ``state``.

    Returns:
        Tuple[scope, entity]: The parent scope, and the finished entity
        that should be attached to it (or None).

    Raises:
        TmxDecodeError: if there is no open scope to close.

    """
    try:
        parent = parents[type(state)]
    except KeyError:
        msg = "closing tag without an open scope: {0}".format(state)
        logger.error(msg)
        raise TmxDecodeError(msg)
    return parent(state)


def tag_of(state) -> Optional[str]:
    """Return the tag that opened ``state``, or None outside of the map"""
    if isinstance(state, InUnknown):
        return state.tag
    return scope_tags.get(type(state))
