from __future__ import annotations

from services.tubely.application.dto import GetVideoCommand
from services.tubely.application.guards import load_owned_video
from services.tubely.application.interfaces import VideoRepository
from services.tubely.application.locators import LocatorResolver
from services.tubely.domain.video import Video


class GetVideoUseCase:
    def __init__(
        self, *, repository: VideoRepository, resolver: LocatorResolver
    ) -> None:
        self._repository = repository
        self._resolver = resolver

    def execute(self, command: GetVideoCommand) -> Video:
        video = load_owned_video(self._repository, command.video_id, command.user_id)
        return self._resolver.resolve_video(video)
