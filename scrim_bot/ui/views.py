from __future__ import annotations

import logging

import discord

from ..core.notifier import Notifier, PostingAction
from ..core.reaper import CleanupReport, ExpiryReaper
from ..core.wizard import BasicInfoDefaults, MapChunk, ScrimWizard
from ..data.models import Scrim
from ..errors import MessagingError, ScrimError
from . import embeds
from .modals import BasicInfoModal, ProfileModal

log = logging.getLogger("scrim.ui")

WIZARD_TIMEOUT = 600


def is_admin(interaction: discord.Interaction, admin_ids: frozenset[int]) -> bool:
    if interaction.user.id in admin_ids:
        return True
    perms = getattr(interaction.user, "guild_permissions", None)
    return bool(perms and perms.administrator)


class EntryChoiceView(discord.ui.View):
    """Offered by ``/scrim`` when the user has a saved profile."""

    def __init__(self, wizard: ScrimWizard) -> None:
        super().__init__(timeout=WIZARD_TIMEOUT)
        self.wizard = wizard

    @discord.ui.button(label="Use Saved Profile", style=discord.ButtonStyle.primary, emoji="⚡")
    async def use_profile(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        defaults = self.wizard.basic_info_defaults(interaction.user.id, use_profile=True)
        await interaction.response.send_modal(BasicInfoModal(self.wizard, defaults))

    @discord.ui.button(label="Create New", style=discord.ButtonStyle.secondary, emoji="📝")
    async def new_scrim(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        defaults = self.wizard.basic_info_defaults(interaction.user.id, use_profile=False)
        await interaction.response.send_modal(BasicInfoModal(self.wizard, defaults))


class QuickScrimView(discord.ui.View):
    def __init__(self, wizard: ScrimWizard) -> None:
        super().__init__(timeout=WIZARD_TIMEOUT)
        self.wizard = wizard

    @discord.ui.button(label="Create Scrim Now", style=discord.ButtonStyle.primary, emoji="🎮")
    async def quick_scrim(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        defaults = self.wizard.basic_info_defaults(interaction.user.id, use_profile=True)
        await interaction.response.send_modal(BasicInfoModal(self.wizard, defaults))


class RetryBasicInfoView(discord.ui.View):
    """Reopens the basic info form after a rejected submission."""

    def __init__(self, wizard: ScrimWizard, defaults: BasicInfoDefaults) -> None:
        super().__init__(timeout=WIZARD_TIMEOUT)
        self.wizard = wizard
        self.defaults = defaults

    @discord.ui.button(label="Try Again", style=discord.ButtonStyle.primary, emoji="📝")
    async def retry(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.send_modal(BasicInfoModal(self.wizard, self.defaults))


class MapSelect(discord.ui.Select):
    def __init__(self, wizard: ScrimWizard, chunk: MapChunk) -> None:
        super().__init__(
            custom_id=f"map_select_{chunk.index}",
            placeholder="Choose maps...",
            min_values=1,
            max_values=chunk.max_values,
            options=[discord.SelectOption(label=m, value=m, emoji="🗺️") for m in chunk.options],
        )
        self.wizard = wizard

    async def callback(self, interaction: discord.Interaction) -> None:
        try:
            self.wizard.select_maps(interaction.user.id, list(self.values))
        except ScrimError as exc:
            await interaction.response.send_message(f"❌ {exc}", ephemeral=True)
            return
        embed = discord.Embed(
            title="🌐 Server Availability",
            description="Do you have a server available for this scrim?",
            color=0x0099FF,
        )
        await interaction.response.send_message(
            embed=embed, view=ServerSelectView(self.wizard), ephemeral=True
        )


class MapSelectView(discord.ui.View):
    def __init__(self, wizard: ScrimWizard, chunks: list[MapChunk]) -> None:
        super().__init__(timeout=WIZARD_TIMEOUT)
        for chunk in chunks:
            self.add_item(MapSelect(wizard, chunk))


class ServerSelectView(discord.ui.View):
    def __init__(self, wizard: ScrimWizard) -> None:
        super().__init__(timeout=WIZARD_TIMEOUT)
        self.wizard = wizard

    @discord.ui.button(label="Yes, I have a server", style=discord.ButtonStyle.success, emoji="✅")
    async def server_yes(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._publish(interaction, True)

    @discord.ui.button(label="No, need a server", style=discord.ButtonStyle.danger, emoji="❌")
    async def server_no(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._publish(interaction, False)

    async def _publish(self, interaction: discord.Interaction, has_server: bool) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            result = await self.wizard.choose_server(
                interaction.user.id, has_server, interaction.user.display_name
            )
        except ScrimError as exc:
            await interaction.followup.send(f"❌ {exc}", ephemeral=True)
            return
        except (MessagingError, OSError):
            log.exception("Error creating scrim post for %s", interaction.user.id)
            await interaction.followup.send(
                "❌ Failed to create scrim post. Please try again.", ephemeral=True
            )
            return
        self.stop()
        await interaction.followup.send(
            "✅ **Scrim request posted successfully!**\n\n"
            f"📍 **Posted in:** <#{result.channel_id}>\n"
            f"🧵 **Discussion thread:** <#{result.thread_id}>\n\n"
            "Other teams can now show interest and coordinate with you!",
            ephemeral=True,
        )


class PostingView(discord.ui.View):
    """Persistent buttons on every scrim post.

    Registered once with ``bot.add_view`` so clicks on posts made before a
    restart are still handled.
    """

    def __init__(self, notifier: Notifier, admin_ids: frozenset[int] = frozenset()) -> None:
        super().__init__(timeout=None)
        self.notifier = notifier
        self.admin_ids = admin_ids

    @discord.ui.button(label="Show Interest", style=discord.ButtonStyle.primary,
                       emoji="🤝", custom_id=PostingAction.SHOW_INTEREST.value)
    async def show_interest(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._dispatch(interaction, PostingAction.SHOW_INTEREST)

    @discord.ui.button(label="Mark as Filled", style=discord.ButtonStyle.success,
                       emoji="✅", custom_id=PostingAction.MARK_FILLED.value)
    async def mark_filled(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._dispatch(interaction, PostingAction.MARK_FILLED)

    @discord.ui.button(label="Cancel", style=discord.ButtonStyle.danger,
                       emoji="❌", custom_id=PostingAction.CANCEL.value)
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._dispatch(interaction, PostingAction.CANCEL)

    async def _dispatch(self, interaction: discord.Interaction, action: PostingAction) -> None:
        name = interaction.user.display_name
        try:
            reply = await self.notifier.handle(
                action,
                interaction.message.id,
                interaction.user.id,
                name,
                is_admin=is_admin(interaction, self.admin_ids),
            )
        except ScrimError as exc:
            await interaction.response.send_message(f"❌ {exc}", ephemeral=True)
            return
        except (MessagingError, OSError):
            log.exception("Failed to handle %s on %s", action.value, interaction.message.id)
            await interaction.response.send_message(
                "❌ Failed to process your request. Please try again.", ephemeral=True
            )
            return
        if action is PostingAction.SHOW_INTEREST:
            await interaction.response.send_message(reply, ephemeral=True)
            return
        original = interaction.message.embeds[0].to_dict() if interaction.message.embeds else {}
        if action is PostingAction.MARK_FILLED:
            closed = embeds.closed_post(original, "✅ Scrim Filled", embeds.GREEN,
                                        f"Marked as filled by {name}")
        else:
            closed = embeds.closed_post(original, "❌ Scrim Cancelled", embeds.RED,
                                        f"Cancelled by {name}")
        await interaction.response.edit_message(embed=discord.Embed.from_dict(closed), view=None)


def cleanup_result_embed(report: CleanupReport | None, requested_by: str) -> discord.Embed:
    if report is None:
        return discord.Embed(
            title="⏳ Cleanup Busy",
            description="A cleanup pass is already running. Try again in a moment.",
            color=embeds.GREY,
        )
    description = f"Successfully cleaned up {report.cleaned} expired scrim(s)."
    if report.errors:
        description += f"\n\n⚠️ {report.errors} scrim(s) had errors during cleanup."
    embed = discord.Embed(title="✅ Cleanup Complete", description=description, color=embeds.GREEN)
    embed.add_field(name="📊 Results", value=f"**Cleaned:** {report.cleaned}\n**Errors:** {report.errors}")
    embed.set_footer(text=f"Cleanup performed by {requested_by}")
    return embed


class CleanupConfirmView(discord.ui.View):
    """Confirm/cancel gate in front of a manual cleanup."""

    def __init__(self, reaper: ExpiryReaper, count: int) -> None:
        super().__init__(timeout=120)
        self.reaper = reaper
        self.confirm.label = f"Cleanup {count} Scrims"

    @discord.ui.button(label="Cleanup", style=discord.ButtonStyle.danger, emoji="🗑️")
    async def confirm(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.defer()
        self.stop()
        try:
            report = await self.reaper.manual_cleanup()
        except OSError:
            log.exception("Manual cleanup failed")
            embed = discord.Embed(
                title="❌ Cleanup Failed",
                description="An error occurred during the cleanup process. Please try again.",
                color=embeds.RED,
            )
        else:
            embed = cleanup_result_embed(report, interaction.user.display_name)
        await interaction.edit_original_response(embed=embed, view=None)

    @discord.ui.button(label="Cancel", style=discord.ButtonStyle.secondary, emoji="❌")
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.stop()
        embed = discord.Embed(
            title="❌ Cleanup Cancelled", description="No scrims were removed.", color=embeds.GREY
        )
        await interaction.response.edit_message(embed=embed, view=None)


class ScrimListView(discord.ui.View):
    PER_PAGE = 5

    def __init__(self, scrims: list[Scrim], owner_id: int) -> None:
        super().__init__(timeout=300)
        self.scrims = scrims
        self.owner_id = owner_id
        self.page = 0
        self._sync_buttons()

    @property
    def pages(self) -> int:
        return max(1, -(-len(self.scrims) // self.PER_PAGE))

    def embed(self) -> discord.Embed:
        return discord.Embed.from_dict(embeds.scrim_list_page(self.scrims, self.page, self.PER_PAGE))

    def _sync_buttons(self) -> None:
        self.previous_page.disabled = self.page == 0
        self.next_page.disabled = self.page >= self.pages - 1

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        return interaction.user.id == self.owner_id

    @discord.ui.button(label="Previous", style=discord.ButtonStyle.secondary, emoji="⬅️")
    async def previous_page(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.page = max(0, self.page - 1)
        self._sync_buttons()
        await interaction.response.edit_message(embed=self.embed(), view=self)

    @discord.ui.button(label="Next", style=discord.ButtonStyle.secondary, emoji="➡️")
    async def next_page(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.page = min(self.pages - 1, self.page + 1)
        self._sync_buttons()
        await interaction.response.edit_message(embed=self.embed(), view=self)


class ProfileActionsView(discord.ui.View):
    def __init__(self, wizard: ScrimWizard, has_profile: bool) -> None:
        super().__init__(timeout=WIZARD_TIMEOUT)
        self.wizard = wizard
        if not has_profile:
            self.edit_profile.label = "Create Profile"
            self.remove_item(self.quick_scrim)

    @discord.ui.button(label="Edit Profile", style=discord.ButtonStyle.secondary, emoji="✏️")
    async def edit_profile(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.send_modal(
            ProfileModal(self.wizard.store, self.wizard, interaction.user.id)
        )

    @discord.ui.button(label="Quick Scrim", style=discord.ButtonStyle.primary, emoji="⚡")
    async def quick_scrim(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        defaults = self.wizard.basic_info_defaults(interaction.user.id, use_profile=True)
        await interaction.response.send_modal(BasicInfoModal(self.wizard, defaults))
