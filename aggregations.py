"""
Derived views over a user snapshot.

All functions are pure: they take any iterable of users, never mutate it, and
return fresh results on every call. Grouping is done in a single pass with a
dict keyed by the grouping value, so output order is first-seen order.
"""
from typing import Dict, Iterable, Iterator, List

from schemas import CountryRank, DailyActiveCount, TeamInsight, User

ELITE_SCORE_THRESHOLD = 900
TOP_COUNTRIES_LIMIT = 5
LOGIN_ACTION = "login"


def iter_elite_users(users: Iterable[User], threshold: int = ELITE_SCORE_THRESHOLD) -> Iterator[User]:
    """Yield active users scoring strictly above ``threshold``, in input order."""
    return (u for u in users if u.score > threshold and u.active)


def elite_users(users: Iterable[User], threshold: int = ELITE_SCORE_THRESHOLD) -> List[User]:
    return list(iter_elite_users(users, threshold))


def top_countries(
    users: Iterable[User],
    limit: int = TOP_COUNTRIES_LIMIT,
    threshold: int = ELITE_SCORE_THRESHOLD,
) -> List[CountryRank]:
    """
    Rank countries by number of elite users.

    Ties keep the order in which the countries were first seen. At most
    ``limit`` entries are returned; fewer (or none) when there are fewer
    distinct countries.
    """
    counts: Dict[str, int] = {}
    for user in iter_elite_users(users, threshold):
        counts[user.country] = counts.get(user.country, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [CountryRank(country=c, count=n) for c, n in ranked[:max(limit, 0)]]


def team_insights(users: Iterable[User]) -> List[TeamInsight]:
    """
    Roll users up by team name.

    Leader names are kept as-is, duplicates included. Finished project names
    are unique per team.
    """
    buckets: Dict[str, TeamInsight] = {}
    for user in users:
        bucket = buckets.get(user.team.name)
        if bucket is None:
            bucket = buckets[user.team.name] = TeamInsight(name=user.team.name)

        bucket.member_count += 1
        if user.active:
            bucket.active_member_count += 1
        if user.team.leader:
            bucket.leader_names.append(user.name)

        for project in user.team.projects:
            if project.completed and project.name not in bucket.finished_project_names:
                bucket.finished_project_names.append(project.name)

    for bucket in buckets.values():
        bucket.percent_active = bucket.active_member_count / bucket.member_count * 100

    return list(buckets.values())


def active_users_per_day(users: Iterable[User]) -> List[DailyActiveCount]:
    """
    Per-day activity counts using the historical rule.

    A date gets a bucket (starting at 0) the first time a login is seen on it.
    From then on every entry on that date, whatever its action, increments it.
    Entries on a date before its first login are not counted.
    """
    counts: Dict[str, int] = {}
    for user in users:
        for entry in user.logs:
            if entry.date in counts:
                counts[entry.date] += 1
            elif entry.action == LOGIN_ACTION:
                counts[entry.date] = 0

    return [DailyActiveCount(date=d, count=n) for d, n in counts.items()]


def logins_per_day(users: Iterable[User]) -> List[DailyActiveCount]:
    """Number of login entries per date. Dates without a login are omitted."""
    counts: Dict[str, int] = {}
    for user in users:
        for entry in user.logs:
            if entry.action == LOGIN_ACTION:
                counts[entry.date] = counts.get(entry.date, 0) + 1

    return [DailyActiveCount(date=d, count=n) for d, n in counts.items()]
