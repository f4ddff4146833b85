from app.models.user import User  # noqa: F401
from app.models.friendship import Friendship  # noqa: F401
from app.models.friend_request import FriendRequest, FriendRequestStatus  # noqa: F401
