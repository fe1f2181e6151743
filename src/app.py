"""
Flask web application for the tennis tournament scheduler.

Tournament data is kept in YAML files, one directory per tournament:

    <DATA_DIR>/tournaments.yaml              registry of tournaments
    <DATA_DIR>/tournaments/<slug>/tournament.yaml
    <DATA_DIR>/tournaments/<slug>/players.yaml
    <DATA_DIR>/tournaments/<slug>/matches.yaml
"""
import os
import re
import shutil
import uuid
import yaml
from datetime import datetime
from functools import wraps
from filelock import FileLock
from flask import Flask, request, jsonify, abort
from scheduler.elimination import get_elimination_bracket_display
from scheduler.errors import SchedulingError, InsufficientPlayers, BracketIntegrityError, InvalidScoreUpdate
from scheduler.models import Player
from scheduler.results import record_result
from scheduler.schedule import generate_schedule, matches_to_dicts, matches_from_dicts, TOURNAMENT_FORMATS, ROUND_ROBIN, ELIMINATION
from scheduler.seeding import get_seeding_strategy
from scheduler.standings import compute_standings, standings_to_dicts

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

PHASES = ('subscribing', 'playing', 'completed')
STATUS_FOR_PHASE = {
    'subscribing': 'upcoming',
    'playing': 'playing',
    'completed': 'completed',
}
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def get_default_settings():
    """Return default tournament settings."""
    return {
        'name': 'Tennis Tournament',
        'type': ELIMINATION,
        'phase': 'subscribing',
        'status': 'upcoming',
        'max_players': 64,
        'seeding': 'registration',
    }


def _data_lock() -> FileLock:
    """Lock guarding every write under DATA_DIR."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(os.path.join(DATA_DIR, '.lock'), timeout=10)


def _slugify(name: str) -> str:
    """Convert tournament name to filesystem-safe slug."""
    slug = name.lower().strip()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'[\s-]+', '-', slug)
    slug = slug.strip('-')
    return slug or 'tournament'


def _tournament_dir(slug: str) -> str:
    return os.path.join(DATA_DIR, 'tournaments', slug)


def _file_path(slug: str, filename: str) -> str:
    return os.path.join(_tournament_dir(slug), filename)


def _load_yaml(path, default):
    if not os.path.exists(path):
        return default
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return default
    return data if data else default


def _save_yaml(path, data):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def load_tournaments() -> list:
    """Load the tournament registry."""
    data = _load_yaml(os.path.join(DATA_DIR, 'tournaments.yaml'), {})
    return data.get('tournaments', [])


def save_tournaments(tournaments: list):
    _save_yaml(os.path.join(DATA_DIR, 'tournaments.yaml'), {'tournaments': tournaments})


def load_settings(slug: str) -> dict:
    """Load tournament settings, merging with defaults."""
    data = _load_yaml(_file_path(slug, 'tournament.yaml'), {})
    settings = get_default_settings()
    settings.update(data)
    return settings


def save_settings(slug: str, settings: dict):
    _save_yaml(_file_path(slug, 'tournament.yaml'), settings)


def load_players(slug: str) -> list:
    """Load registered players in registration order."""
    return [Player.from_dict(item) for item in _load_yaml(_file_path(slug, 'players.yaml'), [])]


def save_players(slug: str, players: list):
    _save_yaml(_file_path(slug, 'players.yaml'), [p.to_dict() for p in players])


def load_matches(slug: str) -> list:
    """Load the generated schedule."""
    return matches_from_dicts(_load_yaml(_file_path(slug, 'matches.yaml'), []))


def save_matches(slug: str, matches: list):
    _save_yaml(_file_path(slug, 'matches.yaml'), matches_to_dicts(matches))


def delete_matches(slug: str):
    path = _file_path(slug, 'matches.yaml')
    if os.path.exists(path):
        os.remove(path)


def tournament_required(f):
    """404 unless the tournament in the URL exists."""
    @wraps(f)
    def decorated_function(slug, *args, **kwargs):
        if not any(t['slug'] == slug for t in load_tournaments()):
            abort(404)
        return f(slug, *args, **kwargs)
    return decorated_function


def _tournament_summary(slug: str) -> dict:
    settings = load_settings(slug)
    players = load_players(slug)
    matches = load_matches(slug)
    return {
        'slug': slug,
        **settings,
        'playersCount': len(players),
        'matchesCount': len(matches),
        'completedMatches': sum(1 for m in matches if m.status == 'completed'),
    }


def generate_tournament_matches(slug: str) -> list:
    """Generate and store a fresh schedule, replacing any previous one."""
    settings = load_settings(slug)
    players = load_players(slug)
    strategy = get_seeding_strategy(settings.get('seeding', 'registration'))
    matches = generate_schedule(players, settings['type'], strategy)
    save_matches(slug, matches)
    app.logger.info(f'Generated {len(matches)} matches for {slug} ({settings["type"]}, {len(players)} players)')
    return matches


@app.errorhandler(404)
def not_found(e):
    return jsonify({'success': False, 'error': 'Not found.'}), 404


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List all tournaments."""
    return jsonify({'tournaments': [_tournament_summary(t['slug']) for t in load_tournaments()]})


@app.route('/api/tournaments', methods=['POST'])
def api_create_tournament():
    """Create a tournament open for registration."""
    payload = request.get_json(silent=True) or {}
    name = (payload.get('name') or '').strip()
    tournament_type = payload.get('type', ELIMINATION)

    if not name:
        return jsonify({'success': False, 'error': 'Tournament name is required.'}), 400
    if tournament_type not in TOURNAMENT_FORMATS:
        return jsonify({'success': False, 'error': f'Type must be one of {", ".join(TOURNAMENT_FORMATS)}.'}), 400

    settings = get_default_settings()
    settings.update({
        'name': name,
        'type': tournament_type,
        'created': datetime.now().isoformat(),
    })
    for key in ('max_players', 'seeding'):
        if key in payload:
            settings[key] = payload[key]
    max_players = settings['max_players']
    if isinstance(max_players, bool) or not isinstance(max_players, int) or max_players < 2:
        return jsonify({'success': False, 'error': 'max_players must be a whole number of at least 2.'}), 400
    if not isinstance(settings['seeding'], str):
        return jsonify({'success': False, 'error': 'Seeding must be a strategy name.'}), 400
    try:
        get_seeding_strategy(settings['seeding'])
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    with _data_lock():
        tournaments = load_tournaments()
        base_slug = _slugify(name)
        slug = base_slug
        existing = {t['slug'] for t in tournaments}
        counter = 2
        while slug in existing:
            slug = f'{base_slug}-{counter}'
            counter += 1
        tournaments.append({'slug': slug, 'name': name})
        save_tournaments(tournaments)
        save_settings(slug, settings)
        save_players(slug, [])

    app.logger.info(f'Created tournament {slug}')
    return jsonify({'success': True, 'tournament': _tournament_summary(slug)}), 201


@app.route('/api/tournaments/<slug>', methods=['GET'])
@tournament_required
def api_get_tournament(slug):
    """Tournament details with its players."""
    summary = _tournament_summary(slug)
    summary['players'] = [p.to_dict() for p in load_players(slug)]
    return jsonify(summary)


@app.route('/api/tournaments/<slug>', methods=['DELETE'])
@tournament_required
def api_delete_tournament(slug):
    """Delete a tournament and all its data."""
    with _data_lock():
        tournaments = [t for t in load_tournaments() if t['slug'] != slug]
        save_tournaments(tournaments)
        shutil.rmtree(_tournament_dir(slug), ignore_errors=True)
    app.logger.info(f'Deleted tournament {slug}')
    return jsonify({'success': True})


@app.route('/api/tournaments/<slug>/players', methods=['POST'])
@tournament_required
def api_register_player(slug):
    """Register a player while the tournament is open."""
    payload = request.get_json(silent=True) or {}
    first_name = (payload.get('firstName') or '').strip()
    last_name = (payload.get('lastName') or '').strip()
    email = (payload.get('email') or '').strip().lower()
    rating = payload.get('rating')

    if not first_name or not email:
        return jsonify({'success': False, 'error': 'First name and email are required.'}), 400
    if not EMAIL_PATTERN.match(email):
        return jsonify({'success': False, 'error': 'Invalid email address.'}), 400
    if rating is not None and (isinstance(rating, bool) or not isinstance(rating, (int, float))):
        return jsonify({'success': False, 'error': 'Rating must be a number.'}), 400

    with _data_lock():
        settings = load_settings(slug)
        if settings['phase'] != 'subscribing':
            return jsonify({'success': False, 'error': 'Registration is closed.'}), 409
        players = load_players(slug)
        if any(p.email == email for p in players):
            return jsonify({'success': False, 'error': 'This email is already registered.'}), 400
        if len(players) >= settings['max_players']:
            return jsonify({'success': False, 'error': 'Tournament is full.'}), 409
        player = Player(uuid.uuid4().hex[:12], first_name, last_name, email, rating=rating)
        players.append(player)
        save_players(slug, players)

    return jsonify({'success': True, 'player': player.to_dict()}), 201


@app.route('/api/tournaments/<slug>/players/<player_id>', methods=['DELETE'])
@tournament_required
def api_remove_player(slug, player_id):
    """Remove a player while the tournament is open."""
    with _data_lock():
        if load_settings(slug)['phase'] != 'subscribing':
            return jsonify({'success': False, 'error': 'Registration is closed.'}), 409
        players = load_players(slug)
        remaining = [p for p in players if p.id != player_id]
        if len(remaining) == len(players):
            return jsonify({'success': False, 'error': 'Player not found.'}), 404
        save_players(slug, remaining)
    return jsonify({'success': True})


@app.route('/api/tournaments/<slug>/phase', methods=['POST'])
@tournament_required
def api_change_phase(slug):
    """
    Move the tournament between phases.

    Leaving 'subscribing' for 'playing' generates the schedule; reopening a
    completed tournament keeps it. Going back to 'subscribing' discards it.
    """
    payload = request.get_json(silent=True) or {}
    phase = payload.get('phase')
    if phase not in PHASES:
        return jsonify({'success': False, 'error': f'Phase must be one of {", ".join(PHASES)}.'}), 400

    with _data_lock():
        settings = load_settings(slug)
        if phase == 'completed' and settings['phase'] == 'subscribing':
            return jsonify({'success': False, 'error': 'A tournament must be played before it is completed.'}), 409
        if phase == 'playing' and settings['phase'] == 'subscribing':
            try:
                matches = generate_tournament_matches(slug)
            except InsufficientPlayers as e:
                return jsonify({'success': False, 'error': str(e)}), 400
            except BracketIntegrityError as e:
                app.logger.error(f'Bracket generation failed for {slug}: {e}')
                return jsonify({'success': False, 'error': str(e)}), 500
        elif phase == 'subscribing':
            delete_matches(slug)
            matches = []
        else:
            matches = load_matches(slug)
        settings['phase'] = phase
        settings['status'] = STATUS_FOR_PHASE[phase]
        save_settings(slug, settings)

    app.logger.info(f'Tournament {slug} phase changed to {phase}')
    return jsonify({'success': True, 'phase': phase, 'matchesCount': len(matches)})


@app.route('/api/tournaments/<slug>/matches', methods=['GET'])
@tournament_required
def api_matches(slug):
    """All matches in schedule order."""
    return jsonify({'matches': matches_to_dicts(load_matches(slug))})


@app.route('/api/tournaments/<slug>/matches/<int:match_number>/score', methods=['POST'])
@tournament_required
def api_record_score(slug, match_number):
    """Record a match score and advance the winner."""
    payload = request.get_json(silent=True) or {}
    player1_sets = payload.get('player1SetsWon')
    player2_sets = payload.get('player2SetsWon')
    detailed_score = (payload.get('detailedScore') or '').strip()

    with _data_lock():
        if load_settings(slug)['phase'] != 'playing':
            return jsonify({'success': False, 'error': 'Tournament is not in play.'}), 409
        matches = load_matches(slug)
        try:
            match = record_result(matches, match_number, player1_sets, player2_sets, detailed_score)
        except InvalidScoreUpdate as e:
            app.logger.warning(f'Rejected score for {slug} match {match_number}: {e}')
            status = 404 if not any(m.match_number == match_number for m in matches) else 400
            return jsonify({'success': False, 'error': str(e)}), status
        save_matches(slug, matches)

    return jsonify({'success': True, 'match': match.to_dict()})


@app.route('/api/tournaments/<slug>/standings', methods=['GET'])
@tournament_required
def api_standings(slug):
    """Round-robin league table."""
    if load_settings(slug)['type'] != ROUND_ROBIN:
        return jsonify({'success': False, 'error': 'Standings are only kept for round-robin tournaments.'}), 400
    standings = compute_standings(load_players(slug), load_matches(slug))
    return jsonify({'standings': standings_to_dicts(standings)})


@app.route('/api/tournaments/<slug>/bracket', methods=['GET'])
@tournament_required
def api_bracket(slug):
    """Elimination bracket grouped by round."""
    if load_settings(slug)['type'] != ELIMINATION:
        return jsonify({'success': False, 'error': 'Brackets are only drawn for elimination tournaments.'}), 400
    matches = load_matches(slug)
    if not matches:
        return jsonify({'success': False, 'error': 'No bracket has been generated yet.'}), 404
    return jsonify(get_elimination_bracket_display(matches))


@app.errorhandler(SchedulingError)
def scheduling_error(e):
    app.logger.warning(f'Scheduling error: {e}')
    return jsonify({'success': False, 'error': str(e)}), 400


if __name__ == '__main__':
    app.run(debug=True, port=5000)
