import io
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

from coinblast_core.cli import describe, main, parse_move
from game import Coin, Coordinate, Direction, GameOver, TileExploded, TileSpawned, TilesMerged, TurnCompleted


class TestCli(unittest.TestCase):
    def test_given_move_text_when_parsing_then_coordinate_and_direction(self):
        self.assertEqual(parse_move('1 2 up'), (Coordinate(1, 2), Direction.UP))
        self.assertEqual(parse_move('0,3,L'), (Coordinate(0, 3), Direction.LEFT))
        with self.assertRaises(ValueError):
            parse_move('1 2')
        with self.assertRaises(ValueError):
            parse_move('a b up')

    def test_given_notifications_when_described_then_readable_lines(self):
        self.assertEqual(describe(TilesMerged(Coordinate(0, 0), Coordinate(1, 0), Coin(2))),
                         'merged (0,0) into (1,0) = 2')
        self.assertEqual(describe(TileExploded(Coordinate(2, 1))), 'explosion at (2,1)')
        self.assertEqual(describe(TileSpawned(Coordinate(3, 3), Coin(1))), 'spawned 1 at (3,3)')
        self.assertEqual(describe(TurnCompleted(5)), 'turn completed, score 5')
        self.assertIn('GAME OVER', describe(GameOver(9)))

    def test_given_bad_and_illegal_input_when_playing_then_prompts_again_and_quits(self):
        buf = io.StringIO()
        with patch('builtins.input', side_effect=['bogus', '9 9 up', 'q']):
            with redirect_stdout(buf):
                main(['--size', '3', '--seed', '5'])
        out = buf.getvalue()
        self.assertIn('Initial board:', out)
        self.assertIn('Could not parse. Try again.', out)
        self.assertIn('Illegal move. Try again.', out)
        self.assertIn('Final score: 0', out)

    def test_given_end_of_input_when_playing_then_exits_cleanly(self):
        buf = io.StringIO()
        with patch('builtins.input', side_effect=EOFError):
            with redirect_stdout(buf):
                main(['--size', '2', '--stall-policy', 'game_over', '--bomb-points', '4'])
        self.assertIn('Final score: 0', buf.getvalue())

    def test_given_unknown_log_level_when_starting_then_usage_error(self):
        err = io.StringIO()
        with patch('sys.stderr', err):
            with self.assertRaises(SystemExit) as ctx:
                main(['--log-level', 'bogus'])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn('--log-level', err.getvalue())

    def test_given_lowercase_log_level_when_starting_then_accepted(self):
        buf = io.StringIO()
        with patch('builtins.input', side_effect=EOFError):
            with redirect_stdout(buf):
                main(['--size', '2', '--log-level', 'debug'])
        self.assertIn('Final score: 0', buf.getvalue())


if __name__ == '__main__':
    unittest.main()
