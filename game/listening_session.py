"""Listening session: songs play back to back with no guessing."""

import logging
from datetime import datetime
from typing import List, Optional

import config
from game.models import GuildMember, InteractionResponse, MessageContext, SeekType, Song
from game.round import BOOKMARK_COMPONENT_ID, ListeningRound
from game.session import Session
from utils.embeds import create_listening_components, create_round_payload

logger = logging.getLogger(__name__)


class ListeningSession(Session):
    """Plays songs from the start; members can vote to skip or bookmark."""

    def prepare_round(self, song: Song) -> ListeningRound:
        return ListeningRound(song)

    def get_seek_type(self) -> str:
        return SeekType.BEGINNING

    async def start_round(self, ctx: MessageContext) -> bool:
        if self.finished or self.round is not None:
            return False

        if not await super().start_round(ctx):
            return False

        round_ = self.round
        if round_ is None:
            return True

        # Nobody guesses here, so playing counts as activity
        self.last_active = datetime.utcnow()

        payload = create_round_payload(
            round_.song,
            self.locale,
            description=None,
            fields=[],
            color=config.EMBED_INFO_COLOR,
            unique_song_counter=self.song_selector.get_unique_song_counter()
        )
        payload.components = create_listening_components(round_.interaction_skip_id, BOOKMARK_COMPONENT_ID)
        round_.interaction_components = payload.components

        message = await self.messenger.send_info_message(self.text_channel_id, payload)
        if message is not None:
            round_.interaction_message = message
            round_.round_message_id = str(message.id)
            self.update_bookmark_song_list(round_)

        return True

    async def process_round_end(self, round_: ListeningRound, ctx, guess_result):
        if round_.interaction_message is not None:
            await self.messenger.edit_message_components(round_.interaction_message)

    async def handle_component_interaction(
        self,
        custom_id: str,
        user: GuildMember,
        message_id: Optional[str],
        ctx: MessageContext
    ) -> InteractionResponse:
        if custom_id == BOOKMARK_COMPONENT_ID:
            return self.handle_bookmark_interaction(message_id, user)

        rejection = self.check_interaction(custom_id, user)
        if rejection is not None:
            return rejection

        return await self.vote_skip(user, ctx)

    def choose_new_owner(self, voice_members: List[GuildMember]) -> Optional[GuildMember]:
        if not voice_members:
            return None
        return self.services.rng.choice(voice_members)

    async def commit_session(self):
        logger.info(f"{self.debug_header()} | Listening session ended. rounds_played = {self.rounds_played}")
