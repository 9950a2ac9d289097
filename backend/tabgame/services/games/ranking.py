from typing import List, Optional

from .state import Game


def ranking_key(group: int, size: int) -> str:
    return f'{group}:{size}'


def record_result(store, game: Game, winner: str, loser: Optional[str]) -> None:
    """Count a finished game for both players and on the (group, size) leaderboard.

    The winner gains a victory and a game; the loser only a game.
    """
    results = [(winner, True)]
    if loser:
        results.append((loser, False))

    for nick, won in results:
        user = store.get('users', nick)
        if not user:
            continue
        user['gamesPlayed'] = int(user.get('gamesPlayed') or 0) + 1
        if won:
            user['victories'] = int(user.get('victories') or 0) + 1
        store.set('users', nick, user)

    key = ranking_key(game.group, game.size)
    table = store.get('rankings', key) or {}
    for nick, won in results:
        entry = table.setdefault(nick, {'victories': 0, 'games': 0})
        entry['games'] += 1
        if won:
            entry['victories'] += 1
    store.set('rankings', key, table)


def top_ranking(store, group: int, size: int, limit: int = 10) -> List[dict]:
    table = store.get('rankings', ranking_key(group, size)) or {}
    rows = [
        {'nick': nick, 'victories': entry['victories'], 'games': entry['games']}
        for nick, entry in table.items()
    ]
    rows.sort(key=lambda row: (-row['victories'], row['nick']))
    return rows[:limit]
