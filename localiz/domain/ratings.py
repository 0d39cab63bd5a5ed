"""Ratings domain service - One 1..5 rating per (author, rated user)."""

from dataclasses import dataclass

from .exceptions import InvalidRating, ResourceNotFound, UserNotFound
from .models import Rating, RatingStats, User
from .ports import RatingRepository, UserRepository


@dataclass
class RatingService:
    ratings: RatingRepository
    users: UserRepository

    def rate(self, author: User, target_user_id: str, value: int) -> tuple[Rating, bool]:
        """
        Create or update the author's rating of a user.

        Returns:
            The stored rating and True when it was newly created
        """
        if not isinstance(value, int) or not 1 <= value <= 5:
            raise InvalidRating("Rating must be an integer between 1 and 5")
        if target_user_id == author.id:
            raise InvalidRating("You cannot rate yourself")
        if self.users.get(target_user_id) is None:
            raise UserNotFound()

        existing = self.ratings.find(author.id, target_user_id)
        if existing is not None:
            existing.value = value
            return self.ratings.update(existing), False
        rating = Rating(author_id=author.id, target_user_id=target_user_id, value=value)
        return self.ratings.add(rating), True

    def remove(self, author: User, target_user_id: str) -> None:
        existing = self.ratings.find(author.id, target_user_id)
        if existing is None:
            raise ResourceNotFound("Rating not found")
        self.ratings.delete(existing.id)

    def stats(self, target_user_id: str) -> RatingStats:
        return self.ratings.stats(target_user_id)
