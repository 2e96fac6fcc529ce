import unittest

from tmxgrid import objects
from tmxgrid.objects import (
    Image,
    Map,
    Object,
    Orientation,
    ParsingError,
    SharedImage,
    StaggerAxis,
    Tile,
    TileCollection,
    TileSet,
)

TEST_SIZE = 16


def tileset_gids_association(test, tmx_map, tileset):
    """every gid of the tileset resolves to the tileset"""
    for gid in range(tileset.firstgid, tileset.last_gid + 1):
        test.assertIs(tileset, tmx_map.tileset_for(gid))


class ParseEnumTest(unittest.TestCase):
    def test_orientation(self):
        self.assertEqual(Orientation.ORTHOGONAL, Orientation.from_string("orthogonal"))
        self.assertEqual(Orientation.ISOMETRIC, Orientation.from_string("isometric"))
        self.assertEqual(Orientation.STAGGERED, Orientation.from_string("staggered"))
        self.assertEqual(Orientation.HEXAGONAL, Orientation.from_string("hexagonal"))

    def test_orientation_ignores_case(self):
        self.assertEqual(Orientation.HEXAGONAL, Orientation.from_string("HexaGonal"))

    def test_orientation_empty(self):
        with self.assertRaises(ParsingError) as cm:
            Orientation.from_string("")
        self.assertEqual("cannot parse from an empty string", str(cm.exception))

    def test_orientation_invalid(self):
        with self.assertRaises(ParsingError) as cm:
            Orientation.from_string("diagonal")
        self.assertEqual("this string is invalid: diagonal", str(cm.exception))

    def test_parsing_error_is_value_error(self):
        with self.assertRaises(ValueError):
            Orientation.from_string("diagonal")

    def test_stagger_axis(self):
        self.assertEqual(StaggerAxis.X, StaggerAxis.from_string("x"))
        self.assertEqual(StaggerAxis.Y, StaggerAxis.from_string("Y"))

    def test_stagger_axis_invalid(self):
        for value in ("", "z", "none", "xy"):
            with self.assertRaises(ParsingError):
                StaggerAxis.from_string(value)


class TileSetTest(unittest.TestCase):
    def test_default_sorts_last(self):
        tileset = TileSet()
        self.assertEqual(objects.UNSET_GID, tileset.firstgid)
        self.assertEqual("unnamed", tileset.name)
        self.assertIsNone(tileset.origin)

    def test_rows(self):
        tileset = TileSet(tilecount=6, columns=2)
        self.assertEqual(3, tileset.rows)

    def test_rows_without_columns(self):
        tileset = TileSet(tilecount=6, columns=0)
        with self.assertRaises(ValueError):
            tileset.rows

    def test_tile_size(self):
        tileset = TileSet(tilewidth=64, tileheight=32)
        self.assertEqual((64, 32), tileset.tile_size)

    def test_last_local_id_single_tile(self):
        self.assertEqual(0, TileSet(tilecount=1).last_local_id)

    def test_last_local_id_empty(self):
        self.assertEqual(0, TileSet(tilecount=0).last_local_id)

    def test_last_local_id_from_count(self):
        tileset = TileSet(tilecount=4, origin=SharedImage(Image("ground.png")))
        self.assertEqual(3, tileset.last_local_id)

    def test_last_local_id_collection_wins_over_count(self):
        tileset = TileSet(tilecount=2, origin=TileCollection.new(Tile(4)))
        self.assertEqual(4, tileset.last_local_id)

    def test_last_gid(self):
        tileset = TileSet(firstgid=10, tilecount=4)
        self.assertEqual(13, tileset.last_gid)

    def test_insert_tile_creates_collection(self):
        tileset = TileSet()
        tile = Tile(3, Image("a.png"))
        tileset.insert_tile(tile)
        self.assertEqual(TileCollection({3: tile}), tileset.origin)

    def test_insert_tile_replaces_shared_image(self):
        # the replacement collection is assigned back, not dropped
        tileset = TileSet(origin=SharedImage(Image("sheet.png")))
        tile = Tile(1, Image("b.png"))
        tileset.insert_tile(tile)
        self.assertIsInstance(tileset.origin, TileCollection)
        self.assertEqual({1: tile}, tileset.origin.tiles)

    def test_insert_tile_adds_to_collection(self):
        tileset = TileSet(origin=TileCollection.new(Tile(0)))
        tileset.insert_tile(Tile(2))
        tileset.insert_tile(Tile(1))
        self.assertEqual([0, 1, 2], [t.id for t in tileset.origin])
        self.assertEqual(3, len(tileset.origin))

    def test_collection_from_tiles(self):
        first = Tile(1, Image("first.png"))
        second = Tile(1, Image("second.png"))
        collection = TileCollection.from_tiles([first, Tile(0), second])
        self.assertIs(second, collection.tiles[1])
        self.assertEqual(1, collection.last_id)

    def test_empty_collection_last_id(self):
        self.assertEqual(0, TileCollection().last_id)


class ObjectTest(unittest.TestCase):
    def test_valid_gid(self):
        self.assertEqual(3, Object(gid=3).valid_gid())

    def test_no_gid(self):
        self.assertIsNone(Object().valid_gid())

    def test_coords_and_size(self):
        obj = Object(x=10, y=20, width=24, height=12)
        self.assertEqual((10, 20), obj.coords)
        self.assertEqual((24, 12), obj.size)


class TilesetsTest(unittest.TestCase):
    def setUp(self):
        self.tileset_none = TileSet(firstgid=1, tilecount=2, name="none")
        self.tileset_image = TileSet(
            firstgid=self.tileset_none.last_gid + 1,
            tilecount=4,
            name="image",
            origin=SharedImage(Image()),
        )
        self.tileset_collection = TileSet(
            firstgid=self.tileset_image.last_gid + 1,
            tilecount=4,
            name="collection",
            origin=TileCollection.new(Tile(4)),
        )
        self.map = Map()
        self.map.add_tilesets(
            [self.tileset_collection, self.tileset_none, self.tileset_image]
        )

    def test_sorted_by_firstgid(self):
        self.assertEqual(
            [self.tileset_none, self.tileset_image, self.tileset_collection],
            self.map.tilesets,
        )
        self.assertIs(self.tileset_collection, self.map.last_tileset())

    def test_every_gid_resolves_to_its_tileset(self):
        self.assertIsNone(self.map.tileset_for(0))
        tileset_gids_association(self, self.map, self.tileset_none)
        tileset_gids_association(self, self.map, self.tileset_image)
        tileset_gids_association(self, self.map, self.tileset_collection)
        self.assertIsNone(self.map.tileset_for(12))

    def test_ranges(self):
        self.assertEqual((1, 2), (self.tileset_none.firstgid, self.tileset_none.last_gid))
        self.assertEqual(
            (3, 6), (self.tileset_image.firstgid, self.tileset_image.last_gid)
        )
        self.assertEqual(
            (7, 11),
            (self.tileset_collection.firstgid, self.tileset_collection.last_gid),
        )

    def test_index_is_dense(self):
        self.assertEqual(12, len(self.map.gid_index))
        self.assertIsNone(self.map.gid_index[0])

    def test_index_shares_tilesets(self):
        for gid in range(3, 7):
            self.assertIs(self.tileset_image, self.map.gid_index[gid])

    def test_negative_gid(self):
        self.assertIsNone(self.map.tileset_for(-1))

    def test_get_tileset_alias(self):
        self.assertIs(self.tileset_image, self.map.get_tileset(4))

    def test_normalize_is_idempotent(self):
        index = list(self.map.gid_index)
        order = list(self.map.tilesets)
        self.map.normalize()
        self.assertEqual(order, self.map.tilesets)
        self.assertEqual(len(index), len(self.map.gid_index))
        for before, after in zip(index, self.map.gid_index):
            self.assertIs(before, after)

    def test_add_tileset_reindexes(self):
        extra = TileSet(firstgid=20, tilecount=2)
        self.map.add_tileset(extra)
        self.assertIs(extra, self.map.tileset_for(21))
        self.assertIsNone(self.map.tileset_for(15))


class NormalizeTest(unittest.TestCase):
    def test_empty_map(self):
        tmx_map = Map()
        tmx_map.normalize()
        self.assertEqual([None], tmx_map.gid_index)
        self.assertIsNone(tmx_map.tileset_for(1))
        self.assertIsNone(tmx_map.last_tileset())

    def test_gaps_are_empty(self):
        first = TileSet(firstgid=1, tilecount=2)
        second = TileSet(firstgid=10, tilecount=1)
        tmx_map = Map()
        tmx_map.add_tilesets([second, first])
        self.assertIs(first, tmx_map.tileset_for(2))
        for gid in range(3, 10):
            self.assertIsNone(tmx_map.tileset_for(gid))
        self.assertIs(second, tmx_map.tileset_for(10))
        self.assertIsNone(tmx_map.tileset_for(11))
        self.assertEqual(11, len(tmx_map.gid_index))

    def test_unset_firstgid_not_indexed(self):
        indexed = TileSet(firstgid=1, tilecount=2)
        unset = TileSet(tilecount=2, name="unset")
        tmx_map = Map()
        with self.assertLogs("tmxgrid.objects", level="WARNING") as cm:
            tmx_map.add_tilesets([unset, indexed])
        self.assertIn("unset", cm.output[0])
        self.assertEqual([indexed, unset], tmx_map.tilesets)
        self.assertEqual(3, len(tmx_map.gid_index))

    def test_overlap_keeps_one_owner(self):
        first = TileSet(firstgid=1, tilecount=4, name="first")
        second = TileSet(firstgid=3, tilecount=4, name="second")
        tmx_map = Map()
        with self.assertLogs("tmxgrid.objects", level="WARNING"):
            tmx_map.add_tilesets([first, second])
        self.assertIs(first, tmx_map.tileset_for(3))
        self.assertIs(first, tmx_map.tileset_for(4))
        self.assertIs(second, tmx_map.tileset_for(5))
        self.assertIs(second, tmx_map.tileset_for(6))
        self.assertIsNone(tmx_map.tileset_for(7))
        self.assertEqual(7, len(tmx_map.gid_index))

    def test_huge_firstgid_not_indexed(self):
        indexed = TileSet(firstgid=1, tilecount=2)
        huge = TileSet(firstgid=4000000000, tilecount=2, name="huge")
        tmx_map = Map()
        with self.assertLogs("tmxgrid.objects", level="WARNING") as cm:
            tmx_map.add_tilesets([huge, indexed])
        self.assertIn("huge", cm.output[0])
        self.assertEqual([indexed, huge], tmx_map.tilesets)
        self.assertEqual(3, len(tmx_map.gid_index))
        self.assertIsNone(tmx_map.tileset_for(4000000000))

    def test_last_gid_at_limit_is_indexed(self):
        tileset = TileSet(firstgid=objects.MAX_INDEXED_GID, tilecount=1)
        tmx_map = Map()
        tmx_map.add_tileset(tileset)
        self.assertIs(tileset, tmx_map.tileset_for(objects.MAX_INDEXED_GID))


class GridCoordsTest(unittest.TestCase):
    def setUp(self):
        self.map = Map(width=TEST_SIZE, height=TEST_SIZE)

    def test_tile_id(self):
        self.assertEqual(0, self.map.tile_id((0, 0)))
        self.assertEqual(3, self.map.tile_id((3, 0)))
        self.assertEqual(19, self.map.tile_id((3, 1)))

    def test_coords(self):
        self.assertEqual((0, 0), self.map.tile_to_grid_coords(0))
        self.assertEqual((3, 0), self.map.tile_to_grid_coords(3))
        self.assertEqual((3, 1), self.map.tile_to_grid_coords(19))

    def test_coords_alias(self):
        coords = self.map.tile_index_to_coords(19)
        self.assertEqual(3, coords.x)
        self.assertEqual(1, coords.y)

    def test_coords_inverse_of_tile_id(self):
        for tile in range(TEST_SIZE * TEST_SIZE):
            col, row = self.map.tile_to_grid_coords(tile)
            self.assertEqual(tile, row * self.map.width + col)

    def test_zero_width(self):
        with self.assertRaises(ValueError):
            Map().tile_to_grid_coords(3)

    def test_tile_gid(self):
        tmx_map = Map(width=2, height=2, tiles=[1, 2, 3])
        self.assertEqual(3, tmx_map.tile_gid((0, 1)))

    def test_tile_gid_short_data_is_empty(self):
        tmx_map = Map(width=2, height=2, tiles=[1, 2, 3])
        self.assertEqual(objects.EMPTY_TILE, tmx_map.tile_gid((1, 1)))
        self.assertEqual(objects.EMPTY_TILE, tmx_map.tile_gid((5, 5)))


class WorldCoordsTest(unittest.TestCase):
    def setUp(self):
        self.map = Map(tilewidth=TEST_SIZE, tileheight=TEST_SIZE)

    def test_orthogonal(self):
        self.assertEqual((56.0, -24.0), self.map.grid_coords_to_world((3, 1)))

    def test_origin_is_tile_center(self):
        self.assertEqual((8.0, -8.0), self.map.grid_coords_to_world((0, 0)))

    def test_hexagonal_stagger_x(self):
        self.map.orientation = Orientation.HEXAGONAL
        self.map.staggeraxis = StaggerAxis.X
        self.assertEqual((32.0, -40.0), self.map.grid_coords_to_world((2, 2)))
        self.assertEqual((44.0, -48.0), self.map.grid_coords_to_world((3, 2)))

    def test_hexagonal_stagger_y(self):
        self.map.orientation = Orientation.HEXAGONAL
        self.map.staggeraxis = StaggerAxis.Y
        self.assertEqual((40.0, -32.0), self.map.grid_coords_to_world((2, 2)))
        self.assertEqual((48.0, -44.0), self.map.grid_coords_to_world((2, 3)))

    def test_returns_floats(self):
        x, y = self.map.grid_coords_to_world((1, 1))
        self.assertIsInstance(x, float)
        self.assertIsInstance(y, float)

    def test_tile_world_coords(self):
        self.map.width = TEST_SIZE
        self.assertEqual((56.0, -24.0), self.map.tile_world_coords(19))

    def test_coords_stagger_axis(self):
        self.assertEqual(StaggerAxis.NONE, self.map.coords_stagger_axis((0, 0)))
        self.assertEqual(StaggerAxis.NONE, self.map.coords_stagger_axis((1, 0)))
        self.assertEqual(StaggerAxis.NONE, self.map.coords_stagger_axis((0, 1)))

        self.map.staggeraxis = StaggerAxis.X
        self.assertEqual(StaggerAxis.NONE, self.map.coords_stagger_axis((0, 0)))
        self.assertEqual(StaggerAxis.X, self.map.coords_stagger_axis((1, 0)))
        self.assertEqual(StaggerAxis.NONE, self.map.coords_stagger_axis((0, 1)))

        self.map.staggeraxis = StaggerAxis.Y
        self.assertEqual(StaggerAxis.NONE, self.map.coords_stagger_axis((0, 0)))
        self.assertEqual(StaggerAxis.NONE, self.map.coords_stagger_axis((1, 0)))
        self.assertEqual(StaggerAxis.Y, self.map.coords_stagger_axis((0, 1)))

    def test_tile_stagger_axis(self):
        self.map.width = 4
        self.map.staggeraxis = StaggerAxis.Y
        self.assertEqual(StaggerAxis.Y, self.map.tile_stagger_axis(5))
        self.assertEqual(StaggerAxis.NONE, self.map.tile_stagger_axis(9))


if __name__ == "__main__":
    unittest.main()
