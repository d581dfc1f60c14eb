import unittest

from game import (
    Bomb,
    Coin,
    GameConfig,
    STALL_GAME_OVER,
    STALL_RESPAWN,
    SPAWN_WEIGHTS,
    Wall,
    parse_spawn_weights,
)


class TestGameConfig(unittest.TestCase):
    def test_given_no_arguments_when_building_then_documented_defaults(self):
        cfg = GameConfig()
        self.assertEqual(cfg.grid_size, 4)
        self.assertEqual(cfg.bomb_points, 10)
        self.assertEqual(cfg.stall_policy, STALL_RESPAWN)
        self.assertIsNone(cfg.seed)
        self.assertEqual(cfg.spawn_weights, SPAWN_WEIGHTS)

    def test_given_bad_values_when_building_then_value_error(self):
        with self.assertRaises(ValueError):
            GameConfig(grid_size=0)
        with self.assertRaises(ValueError):
            GameConfig(bomb_points=-1)
        with self.assertRaises(ValueError):
            GameConfig(stall_policy='panic')
        with self.assertRaises(ValueError):
            GameConfig(spawn_weights=())
        with self.assertRaises(ValueError):
            GameConfig(spawn_weights=((Coin(1), 0),))

    def test_given_single_cell_grid_when_building_then_value_error(self):
        with self.assertRaises(ValueError):
            GameConfig(grid_size=1)
        with self.assertRaises(ValueError):
            GameConfig.from_env({'COINBLAST_GRID_SIZE': '1'})
        self.assertEqual(GameConfig(grid_size=2).grid_size, 2)

    def test_given_bomb_points_when_building_spawn_table_then_bombs_carry_points(self):
        table = GameConfig(bomb_points=25).spawn_table()
        bombs = [t for t, _ in table if isinstance(t, Bomb)]
        self.assertEqual(bombs, [Bomb(25)])
        self.assertEqual([w for _, w in table], [w for _, w in SPAWN_WEIGHTS])

    def test_given_environment_when_from_env_then_values_parsed(self):
        env = {
            'COINBLAST_GRID_SIZE': '6',
            'COINBLAST_BOMB_POINTS': '3',
            'COINBLAST_SEED': '17',
            'COINBLAST_STALL_POLICY': 'GAME_OVER',
            'COINBLAST_SPAWN_WEIGHTS': '1:2, B:1',
        }
        cfg = GameConfig.from_env(env)
        self.assertEqual(cfg.grid_size, 6)
        self.assertEqual(cfg.bomb_points, 3)
        self.assertEqual(cfg.seed, 17)
        self.assertEqual(cfg.stall_policy, STALL_GAME_OVER)
        self.assertEqual(cfg.spawn_weights, ((Coin(1), 2), (Bomb(), 1)))

    def test_given_empty_environment_when_from_env_then_defaults(self):
        self.assertEqual(GameConfig.from_env({}), GameConfig())

    def test_given_garbage_environment_when_from_env_then_value_error(self):
        with self.assertRaises(ValueError):
            GameConfig.from_env({'COINBLAST_GRID_SIZE': 'big'})
        with self.assertRaises(ValueError):
            GameConfig.from_env({'COINBLAST_SPAWN_WEIGHTS': '1=45'})

    def test_given_overrides_when_applied_then_none_values_ignored(self):
        cfg = GameConfig(grid_size=5).with_overrides(grid_size=None, seed=3)
        self.assertEqual(cfg.grid_size, 5)
        self.assertEqual(cfg.seed, 3)

    def test_given_weight_text_when_parsing_then_tiles_and_errors(self):
        self.assertEqual(parse_spawn_weights('1:45,2:20,B:30,W:5'),
                         ((Coin(1), 45), (Coin(2), 20), (Bomb(), 30), (Wall(), 5)))
        with self.assertRaises(ValueError):
            parse_spawn_weights('.:3')
        with self.assertRaises(ValueError):
            parse_spawn_weights('X:3')
        with self.assertRaises(ValueError):
            parse_spawn_weights('1:many')


if __name__ == '__main__':
    unittest.main()
