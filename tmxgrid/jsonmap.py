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

Decode a map stored as key/value records instead of nested tags.

The fields are the same as in the tmx document.  Repeated tags become
lists of records, and the layer data is a csv string (or a list of
gids) under ``layer.data``:

    {
        "width": 2, "height": 1, "tilewidth": 16, "tileheight": 16,
        "tileset": [{"firstgid": 1, "tilecount": 4, "name": "ground",
                     "image": {"source": "ground.png"}}],
        "layer": {"data": "1,2"},
        "objectgroup": [{"id": 2, "name": "spawns", "object": []}]
    }

"""
import json
import logging
from typing import Any, Iterator, List, Mapping, Optional

from tmxgrid.errors import TmxDecodeError
from tmxgrid.objects import (
    Image,
    Map,
    Object,
    ObjectGroup,
    SharedImage,
    Tile,
    TileCollection,
    TileSet,
)
from tmxgrid.tags import (
    convert_to_uint,
    decode_csv_data,
    image_fields,
    map_fields,
    object_fields,
    objectgroup_fields,
    set_attributes,
    tile_fields,
    tileset_fields,
)

logger = logging.getLogger(__name__)


def records(value: Any, key: str) -> Iterator[Mapping]:
    """Iterate the records of a repeated field

    A single record is accepted where a list is expected.  Anything that
    is not a record is skipped with a warning.

    """
    if isinstance(value, Mapping):
        value = [value]
    elif not isinstance(value, list):
        logger.warning('field "%s" - expected a list of records, got %r', key, value)
        return
    for item in value:
        if isinstance(item, Mapping):
            yield item
        else:
            logger.warning('field "%s" - expected a record, got %r', key, item)


def decode_image(value: Any) -> Optional[Image]:
    if not isinstance(value, Mapping):
        logger.warning('field "image" - expected a record, got %r', value)
        return None
    image = Image()
    set_attributes(image, value, image_fields)
    return image


def decode_tile(record: Mapping) -> Tile:
    tile = Tile()
    set_attributes(tile, record, tile_fields)
    if "image" in record:
        tile.image = decode_image(record["image"])
    return tile


def decode_tileset(record: Mapping) -> TileSet:
    tileset = TileSet()
    set_attributes(tileset, record, tileset_fields)

    # a tileset has one origin; the first one found wins
    for key, value in record.items():
        if key not in ("image", "tile"):
            continue
        if tileset.origin is not None:
            logger.warning('the tileset "%s" has already an origin', tileset.name)
        elif key == "image":
            image = decode_image(value)
            if image is not None and image.source:
                tileset.origin = SharedImage(image)
        else:
            tiles = [decode_tile(i) for i in records(value, key)]
            if tiles:
                tileset.origin = TileCollection.from_tiles(tiles)

    return tileset


def decode_object(record: Mapping) -> Object:
    obj = Object()
    set_attributes(obj, record, object_fields)
    return obj


def decode_objectgroup(record: Mapping) -> ObjectGroup:
    group = ObjectGroup()
    set_attributes(group, record, objectgroup_fields)
    objects = records(record.get("object", []), "object")
    group.objects.extend(decode_object(i) for i in objects)
    return group


def decode_layer_data(value: Any) -> Optional[List[int]]:
    """Return the gids of a layer's data field, or None if it has none"""
    if isinstance(value, str):
        if not value.strip():
            return None
        return decode_csv_data(value)
    if isinstance(value, list):
        gids = list()
        for item in value:
            try:
                gids.append(convert_to_uint(item))
            except ValueError:
                logger.debug("dropping layer data token %r", item)
        return gids
    logger.warning('field "data" - expected csv text or a list, got %r', value)
    return None


def decode_map(data: Mapping) -> Map:
    """Build a map from a decoded key/value document

    Args:
        data (Mapping): The top level record.

    Returns:
        Map: The decoded map, with the gid index built.

    """
    tmx_map = Map()
    set_attributes(tmx_map, data, map_fields)

    for record in records(data.get("tileset", []), "tileset"):
        tmx_map.add_tileset_without_reordering(decode_tileset(record))

    for record in records(data.get("objectgroup", []), "objectgroup"):
        tmx_map.object_groups.append(decode_objectgroup(record))

    # the last layer with data wins, as in the tmx document
    for record in records(data.get("layer", []), "layer"):
        if "data" not in record:
            continue
        tiles = decode_layer_data(record["data"])
        if tiles is not None:
            tmx_map.tiles = tiles

    tmx_map.normalize()
    return tmx_map


def loads_json(text: str) -> Map:
    """Load a map from the contents of a json file

    Raises:
        TmxDecodeError: if the text is not json, or not a json object.

    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = "Error at line {0} column {1}: {2}".format(e.lineno, e.colno, e.msg)
        logger.error(msg)
        raise TmxDecodeError(msg) from e

    if not isinstance(data, Mapping):
        msg = "map document must be a json object, got {0}".format(type(data).__name__)
        logger.error(msg)
        raise TmxDecodeError(msg)

    return decode_map(data)


def load_json(path: str) -> Map:
    """Load a map from a .json file"""
    with open(path, encoding="utf-8") as fp:
        return loads_json(fp.read())
