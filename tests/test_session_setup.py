import random
import signal
import subprocess
import unittest

from rojacast.browser import ClientIdentity
from rojacast.config import USER_AGENTS, parse_frame_hops
from rojacast.player import player_argv, watch


class ClientIdentityTests(unittest.TestCase):
    def test_headers(self) -> None:
        headers = ClientIdentity("UA/1.0").headers()
        self.assertEqual(headers["User-Agent"], "UA/1.0")
        self.assertEqual(headers["Accept-Language"], "en-US,en;q=0.5")
        self.assertEqual(headers["Referer"], "https://www.google.com/")
        self.assertEqual(headers["DNT"], "1")
        self.assertNotIn("DNT", ClientIdentity("UA/1.0", do_not_track=False).headers())

    def test_random_identity_comes_from_pool(self) -> None:
        identity = ClientIdentity.random(random.Random(7))
        self.assertIn(identity.user_agent, USER_AGENTS)
        self.assertEqual(identity, ClientIdentity.random(random.Random(7)))


class FrameHopTableTests(unittest.TestCase):
    def test_parse(self) -> None:
        hops = parse_frame_hops("div > iframe | iframe.player ; body > iframe")
        self.assertEqual([h.name for h in hops], ["outer", "inner"])
        self.assertEqual(hops[0].selectors, ("div > iframe", "iframe.player"))
        self.assertEqual(hops[1].selectors, ("body > iframe",))

    def test_empty_table_rejected(self) -> None:
        with self.assertRaises(ValueError):
            parse_frame_hops(" ; ")


class _Process:
    def __init__(self):
        self.signals = []
        self.waits = 0

    def wait(self, timeout=None):
        self.waits += 1
        if self.waits == 1:
            raise KeyboardInterrupt
        return 0

    def send_signal(self, sig):
        self.signals.append(sig)

    def kill(self):
        raise AssertionError("player should have exited on SIGINT")


class PlayerTests(unittest.TestCase):
    def test_url_is_single_trailing_argument(self) -> None:
        url = "https://cdn.example/video.m3u8?token=a b"
        self.assertEqual(player_argv(url, "mpv --fs"), ["mpv", "--fs", url])

    def test_interrupt_is_forwarded_to_player(self) -> None:
        proc = _Process()
        with self.assertLogs("rojacast.player", level="WARNING"):
            with self.assertRaises(KeyboardInterrupt):
                watch(proc)
        self.assertEqual(proc.signals, [signal.SIGINT])

    def test_stubborn_player_is_killed(self) -> None:
        class Stubborn(_Process):
            killed = False

            def wait(self, timeout=None):
                self.waits += 1
                if self.waits == 1:
                    raise KeyboardInterrupt
                if self.waits == 2:
                    raise subprocess.TimeoutExpired("mpv", timeout)
                return -9

            def kill(self):
                self.killed = True

        proc = Stubborn()
        with self.assertLogs("rojacast.player", level="WARNING"):
            with self.assertRaises(KeyboardInterrupt):
                watch(proc, grace=0.1)
        self.assertTrue(proc.killed)


if __name__ == "__main__":
    unittest.main()
