import argparse
import os
import yaml
from scheduler.elimination import group_matches_by_round
from scheduler.models import Player, PlayerSlot, ByeSlot
from scheduler.schedule import generate_schedule, TOURNAMENT_FORMATS, ELIMINATION
from scheduler.seeding import get_seeding_strategy, SEEDING_STRATEGIES


def load_players(file_path):
    """
    Load players from YAML.

    Accepts a list of entries, each either a "First Last" string or a dict
    with firstName / lastName / email / rating (and optionally id).
    """
    players = []
    with open(file_path, mode='r', encoding='utf-8') as file:
        entries = yaml.safe_load(file) or []
    for index, entry in enumerate(entries, start=1):
        if isinstance(entry, str):
            first_name, _, last_name = entry.strip().partition(' ')
            players.append(Player(id=f"p{index}", first_name=first_name, last_name=last_name))
        else:
            players.append(Player(
                id=str(entry.get('id', f"p{index}")),
                first_name=entry.get('firstName', ''),
                last_name=entry.get('lastName', ''),
                email=entry.get('email', ''),
                rating=entry.get('rating'),
            ))
    return players


def describe_slot(slot):
    if isinstance(slot, PlayerSlot):
        return f"({slot.player.seed}) {slot.player.full_name}"
    if isinstance(slot, ByeSlot):
        return "BYE"
    return f"Winner M{slot.source_match}"


def format_schedule(matches):
    """Render matches grouped by round, one line per match."""
    lines = []
    for round_number, round_matches in group_matches_by_round(matches).items():
        if lines:
            lines.append("")
        lines.append(f"# Round {round_number} - {round_matches[0].round_name}")
        for match in round_matches:
            line = f"{match.bracket}: {describe_slot(match.player1)} vs {describe_slot(match.player2)}"
            if match.has_bye and match.status == 'completed':
                line += " (walkover)"
            lines.append(line)
    return "\n".join(lines)


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Preview a tournament schedule.')
    parser.add_argument('players_file', nargs='?', default=os.path.join(base_dir, 'data', 'players.yaml'))
    parser.add_argument('--format', dest='tournament_format', choices=TOURNAMENT_FORMATS, default=ELIMINATION)
    parser.add_argument('--seeding', choices=sorted(SEEDING_STRATEGIES), default='registration')
    args = parser.parse_args(argv)

    players = load_players(args.players_file)
    if len(players) < 2:
        print(f"Need at least 2 players, found {len(players)} in {args.players_file}")
        return 1

    matches = generate_schedule(players, args.tournament_format, get_seeding_strategy(args.seeding))
    print(format_schedule(matches))
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
