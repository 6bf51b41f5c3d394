"""Correlation topics and their transports."""

from .base import Topic, TopicFactory, new_topic_id
from .chasqui import ChasquiTopic, ChasquiTopicFactory
from .factory import default_topic_factory
from .redirect import RedirectTopic, RedirectTopicFactory

__all__ = [
    "Topic",
    "TopicFactory",
    "new_topic_id",
    "ChasquiTopic",
    "ChasquiTopicFactory",
    "RedirectTopic",
    "RedirectTopicFactory",
    "default_topic_factory",
]
