from travel_content.db.models.content_cache import SocialContentCache

__all__ = ["SocialContentCache"]
