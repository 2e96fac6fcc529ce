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
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Tuple

from tmxgrid.objects import Orientation, ParsingError, StaggerAxis
from tmxgrid.scope import (
    AtMap,
    InLayerData,
    InObject,
    InObjectGroup,
    InTile,
    InTileImage,
    InTileSet,
    InTileSetImage,
)

logger = logging.getLogger(__name__)

U32_MAX = 0xFFFFFFFF

# layer data is split on commas and line breaks
DATA_DELIMITERS = re.compile(r"[,\r\n]")


def convert_to_uint(value: Any) -> int:
    """Convert a decimal string or an int to an unsigned 32 bit integer

    Raises:
        ValueError: if `value` is empty, signed, fractional or out of range.

    """
    if isinstance(value, bool):
        raise ParsingError.invalid(value)
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not text:
            raise ParsingError.empty()
        if not (text.isascii() and text.isdigit()):
            raise ParsingError.invalid(value)
        number = int(text)
    if not 0 <= number <= U32_MAX:
        raise ValueError("{} is out of range for an unsigned integer".format(number))
    return number


def register_data(
    target: Any, name: str, convert: Callable[[Any], Any], value: Any, key: str
) -> None:
    """Convert `value` and store it as `name` on `target`

    If the conversion fails a warning is logged and the attribute keeps
    its current value.

    """
    try:
        setattr(target, name, convert(value))
    except (ValueError, TypeError) as e:
        logger.warning('field "%s" - %s (value: %r)', key, e, value)


Fields = Dict[str, Tuple[str, Callable[[Any], Any]]]

# attribute key -> (python attribute, converter)
map_fields: Fields = {
    "width": ("width", convert_to_uint),
    "height": ("height", convert_to_uint),
    "tilewidth": ("tilewidth", convert_to_uint),
    "tileheight": ("tileheight", convert_to_uint),
    "orientation": ("orientation", Orientation.from_string),
    "staggeraxis": ("staggeraxis", StaggerAxis.from_string),
}

tileset_fields: Fields = {
    "firstgid": ("firstgid", convert_to_uint),
    "tilewidth": ("tilewidth", convert_to_uint),
    "tileheight": ("tileheight", convert_to_uint),
    "tilecount": ("tilecount", convert_to_uint),
    "columns": ("columns", convert_to_uint),
    "name": ("name", str),
}

image_fields: Fields = {
    "source": ("source", str),
    "width": ("width", convert_to_uint),
    "height": ("height", convert_to_uint),
}

tile_fields: Fields = {
    "id": ("id", convert_to_uint),
}

objectgroup_fields: Fields = {
    "id": ("id", convert_to_uint),
    "name": ("name", str),
}

object_fields: Fields = {
    "id": ("id", convert_to_uint),
    "gid": ("gid", convert_to_uint),
    "x": ("x", convert_to_uint),
    "y": ("y", convert_to_uint),
    "width": ("width", convert_to_uint),
    "height": ("height", convert_to_uint),
}


def set_attributes(target: Any, attrib: Mapping[str, Any], fields: Fields) -> None:
    """Copy the known attributes onto `target`; unknown keys are skipped"""
    for key, value in attrib.items():
        try:
            name, convert = fields[key]
        except KeyError:
            continue
        register_data(target, name, convert, value, key)


def decode_csv_data(text: str) -> List[int]:
    """Return the gids of csv encoded layer data

    Tokens that are not unsigned integers are dropped, so the result may
    be shorter than the layer.

    """
    gids = list()
    for token in DATA_DELIMITERS.split(text):
        try:
            gids.append(convert_to_uint(token))
        except ValueError:
            if token.strip():
                logger.debug("dropping layer data token %r", token)
    return gids


# scope decoders


def decode_map(scope: AtMap, attrib, tmx_map) -> None:
    set_attributes(tmx_map, attrib, map_fields)


def decode_tileset(scope: InTileSet, attrib, tmx_map) -> None:
    set_attributes(scope.tileset, attrib, tileset_fields)


def decode_image(scope, attrib, tmx_map) -> None:
    set_attributes(scope.image, attrib, image_fields)


def decode_tile(scope: InTile, attrib, tmx_map) -> None:
    set_attributes(scope.tile, attrib, tile_fields)


def decode_objectgroup(scope: InObjectGroup, attrib, tmx_map) -> None:
    set_attributes(scope.group, attrib, objectgroup_fields)


def decode_object(scope: InObject, attrib, tmx_map) -> None:
    set_attributes(scope.obj, attrib, object_fields)


decoders = {
    AtMap: decode_map,
    InTileSet: decode_tileset,
    InTileSetImage: decode_image,
    InTile: decode_tile,
    InTileImage: decode_image,
    InObjectGroup: decode_objectgroup,
    InObject: decode_object,
}


def decode_attributes(scope, attrib: Mapping[str, Any], tmx_map) -> None:
    """Fill the entity of the current scope from a tag's attributes"""
    try:
        decoder = decoders[type(scope)]
    except KeyError:
        return
    decoder(scope, attrib, tmx_map)


def decode_text(scope, text: str, tmx_map) -> None:
    """Consume the text of a tag; only layer data carries any"""
    if isinstance(scope, InLayerData):
        tmx_map.tiles = decode_csv_data(text)
