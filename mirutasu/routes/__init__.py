from . import anime, auth, games, recurring_tasks, statistics, tasks, users

ROUTERS = [
    auth.router,
    users.router,
    tasks.router,
    anime.router,
    games.router,
    recurring_tasks.router,
    statistics.router,
]
