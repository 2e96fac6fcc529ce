"""
Copyright (C) 2012-2020, Leif Theden <leif.theden@gmail.com>

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
License along with tmxgrid.  If not, see <http://www.gnu.org/licenses/>.
"""
import io
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Union
from xml.etree import ElementTree

from tmxgrid.errors import TmxDecodeError
from tmxgrid.objects import Image, Map, Object, ObjectGroup, SharedImage, Tile, TileSet
from tmxgrid.scope import (
    AtDocument,
    AtMap,
    InObjectGroup,
    InTile,
    InTileSet,
    enter,
    leave,
    tag_of,
)
from tmxgrid.tags import decode_attributes, decode_text

logger = logging.getLogger(__name__)

START = "start"
TEXT = "text"
END = "end"


@dataclass
class Token:
    type: str
    name: str = None
    attrib: Dict[str, str] = field(default_factory=dict)
    text: str = None


@dataclass
class Context:
    """State of one decoding session"""

    map: Map = field(default_factory=Map)
    state: Any = field(default_factory=AtDocument)
    path: str = None
    folder: str = None


# operations: attach a finished entity to the scope that was open around it


def add_tileset(ctx, parent: AtMap, child: TileSet):
    ctx.map.add_tileset_without_reordering(child)


def add_tile_to_tileset(ctx, parent: InTileSet, child: Tile):
    parent.tileset.insert_tile(child)


def set_tileset_image(ctx, parent: InTileSet, child: Image):
    if child.source:
        parent.tileset.origin = SharedImage(child)


def set_tile_image(ctx, parent: InTile, child: Image):
    parent.tile.image = child


def add_objectgroup(ctx, parent: AtMap, child: ObjectGroup):
    ctx.map.object_groups.append(child)


def add_object(ctx, parent: InObjectGroup, child: Object):
    parent.group.objects.append(child)


operations = {
    (AtMap, TileSet): add_tileset,
    (AtMap, ObjectGroup): add_objectgroup,
    (InTileSet, Image): set_tileset_image,
    (InTileSet, Tile): add_tile_to_tileset,
    (InTile, Image): set_tile_image,
    (InObjectGroup, Object): add_object,
}


def finish_scope(ctx: Context) -> None:
    """Close the current scope and hand its entity to the parent"""
    parent, child = leave(ctx.state)
    if child is not None:
        operation = operations[(type(parent), type(child))]
        operation(ctx, parent, child)
    ctx.state = parent


def process_token(ctx: Context, token: Token) -> None:
    if token.type == START:
        ctx.state = enter(ctx.state, token.name)
        decode_attributes(ctx.state, token.attrib, ctx.map)
    elif token.type == TEXT:
        decode_text(ctx.state, token.text, ctx.map)
    elif token.type == END:
        if token.name is not None and token.name != tag_of(ctx.state):
            msg = "</{0}> does not close <{1}> ({2})".format(
                token.name, tag_of(ctx.state), ctx.path
            )
            logger.error(msg)
            raise TmxDecodeError(msg)
        finish_scope(ctx)
    else:
        raise TmxDecodeError("unknown token type: {0}".format(token.type))


def decode_tokens(tokens: Iterable[Token], ctx: Context = None) -> Map:
    """Build a map from a stream of tokens

    Args:
        tokens (Iterable[Token]): start/text/end events, in document order.
        ctx (Context): Optional session to decode into.

    Returns:
        Map: The decoded map, with the gid index built.

    Raises:
        TmxDecodeError: if the stream is unbalanced or ends inside a tag.

    """
    if ctx is None:
        ctx = Context()

    for token in tokens:
        process_token(ctx, token)

    if not isinstance(ctx.state, AtDocument):
        msg = "unexpected end of document inside {0} ({1})".format(
            type(ctx.state).__name__, ctx.path
        )
        logger.error(msg)
        raise TmxDecodeError(msg)

    ctx.map.normalize()
    return ctx.map


def iter_xml_tokens(source) -> Iterator[Token]:
    """Read an xml document as a stream of tokens

    The text of an element is emitted just before its end token.

    Args:
        source: A filename or a binary file object.

    Raises:
        TmxDecodeError: if the document is not well-formed.

    """
    try:
        for event, element in ElementTree.iterparse(source, events=(START, END)):
            if event == START:
                yield Token(START, element.tag, dict(element.attrib))
            else:
                if element.text and element.text.strip():
                    yield Token(TEXT, element.tag, text=element.text)
                yield Token(END, element.tag)
                element.clear()
    except ElementTree.ParseError as e:
        msg = "Error at position {0}: {1}".format(e.position, e)
        logger.error(msg)
        raise TmxDecodeError(msg) from e


def load_tmxmap(path: str) -> Map:
    """Load a map from a .tmx file"""
    ctx = Context(path=path, folder=os.path.dirname(path))
    return decode_tokens(iter_xml_tokens(path), ctx)


def loads_tmx(data: Union[str, bytes]) -> Map:
    """Load a map from the contents of a .tmx file"""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return decode_tokens(iter_xml_tokens(io.BytesIO(data)))
