"""
Filmorate: сервис фильмов, пользователей, лайков и дружбы.
"""

__version__ = "1.0.0"
