import argparse
import json
import logging

from chessvoice.config import VoiceConfig
from chessvoice.controller import ActionKind, VoiceMoveController
from chessvoice.referee import Referee


def load_json_config(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logging.getLogger("play_voice").error("Failed to read config %s: %s", path, e)
        return {}


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Play a game by typing what a speech recognizer would hear.")
    ap.add_argument("--config", default=None, help="Optional JSON config file to load defaults from.")
    ap.add_argument("--fen", default=None, help="Starting position (defaults to the initial position)")
    ap.add_argument("--lang", default=None, help="Grammar language, e.g. en or de")
    ap.add_argument("--clarity", type=int, choices=[0, 1, 2], default=None, help="0 = loose, 2 = strict")
    ap.add_argument("--timer", type=int, choices=range(6), default=None, help="Countdown step (0 disables)")
    ap.add_argument("--numbers", action="store_true", help="Label choices with numbers instead of colors")
    ap.add_argument("--phrases", action="store_true", help="Print every accepted phrase for the start position and exit")
    ap.add_argument("--pgn-out", default=None, help="Optional path to write PGN at end")
    ap.add_argument("--log-level", default=None, help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()

    cfg_dict = load_json_config(args.config) if args.config else {}

    # Resolve values with precedence: CLI arg if provided -> config -> default
    def pick(*keys, default=None):
        for k in keys:
            v = getattr(args, k, None)
            if v is not None:
                return v
            if k in cfg_dict and cfg_dict[k] is not None:
                return cfg_dict[k]
        return default

    log_level = pick("log_level", default="INFO").upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("play_voice")

    cfg = VoiceConfig()
    cfg.lang = pick("lang", default=cfg.lang)
    cfg.clarity = int(pick("clarity", default=cfg.clarity))
    cfg.timer_index = int(pick("timer", default=cfg.timer_index))
    cfg.use_colors = not (args.numbers or cfg_dict.get("numbers", False))

    ref = Referee(starting_fen=pick("fen"))
    ref.set_headers(white="voice", black="voice")
    ctrl = VoiceMoveController(host=ref, cfg=cfg, board=ref.board)
    ref.on_move.append(ctrl.update)

    if args.phrases:
        for phrase, result in sorted(ctrl.list_all_phrases()):
            print(f"{phrase:32} {result}")
        raise SystemExit(0)

    print("Type what was heard. '!stop' cancels, '!partial <word>' answers a countdown, '!quit' exits.")
    while ref.status() == "*":
        print()
        print(ref.board.unicode(orientation=ref.white_pov))
        try:
            line = input("heard> ").strip()
        except EOFError:
            break
        if line == "!quit":
            break
        if line == "!stop":
            action = ctrl.resolve("", "stop")
        elif line.startswith("!partial "):
            action = ctrl.resolve(line[len("!partial "):], "partial")
        else:
            action = ctrl.resolve(line)
        if action.kind is ActionKind.AMBIGUITY:
            for label, uci in action.choices.items():
                print(f"  {label}: {uci}")
        elif action:
            print(f"  {action.kind.value}: {action.value}")
        else:
            print("  (nothing)")

    result = ref.status()
    log.info("Game finished result=%s", result)
    if args.pgn_out:
        with open(args.pgn_out, "w", encoding="utf-8") as f:
            f.write(ref.pgn())
        log.info("Wrote PGN to %s", args.pgn_out)
