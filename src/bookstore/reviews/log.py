"""Append-only log of reviews."""


class ReviewLog:
    def __init__(self):
        self._reviews = []

    def __len__(self):
        return len(self._reviews)

    def append(self, review):
        self._reviews.append(review)

    def reviews(self):
        return list(self._reviews)

    def reviews_for(self, item_id):
        return [review for review in self._reviews if review.item_id == item_id]

    def average_rating(self, item_id):
        ratings = [review.rating for review in self.reviews_for(item_id)]
        return sum(ratings) / len(ratings) if ratings else None
