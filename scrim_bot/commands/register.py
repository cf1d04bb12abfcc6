"""Registration of slash commands for the bot."""

from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from ..config import Settings
from ..core.reaper import ExpiryReaper
from ..core.wizard import ScrimWizard
from ..data.store import SCRIM_CHANNEL_KEY
from ..errors import ScrimError
from ..ui.modals import BasicInfoModal, ProfileModal
from ..ui.views import CleanupConfirmView, EntryChoiceView, ProfileActionsView, ScrimListView, is_admin

log = logging.getLogger("scrim.commands")

ADMIN_ONLY = "❌ You need Administrator permissions to use this command."


def register_commands(
    bot: commands.Bot, wizard: ScrimWizard, reaper: ExpiryReaper, settings: Settings
) -> None:
    """Register every slash command on ``bot.tree``."""
    tree = bot.tree
    store = wizard.store

    # ------------------------------------------------------------------
    # Scrim wizard and listing
    @tree.command(name="scrim", description="Create a new scrim request")
    async def scrim(interaction: discord.Interaction) -> None:
        profile = wizard.entry(interaction.user.id)
        if profile is None:
            await interaction.response.send_modal(BasicInfoModal(wizard))
            return
        embed = discord.Embed(
            title="🎯 Create Scrim Request",
            description=(
                f"Found your saved profile!\n\n**Team:** {profile.team_name}\n"
                f"**Division:** {profile.division}\n\n"
                "Would you like to use your saved profile or create a new one?"
            ),
            color=0x0099FF,
        )
        await interaction.response.send_message(
            embed=embed, view=EntryChoiceView(wizard), ephemeral=True
        )

    @tree.command(name="scrimlist", description="View all active scrim requests")
    async def scrimlist(interaction: discord.Interaction) -> None:
        view = ScrimListView(store.list_active(), interaction.user.id)
        if view.pages > 1:
            await interaction.response.send_message(embed=view.embed(), view=view, ephemeral=True)
        else:
            await interaction.response.send_message(embed=view.embed(), ephemeral=True)

    @tree.command(
        name="scrimclear",
        description="Manually cleanup expired or completed scrims (Admin only)",
    )
    @app_commands.default_permissions(administrator=True)
    async def scrimclear(interaction: discord.Interaction) -> None:
        if not is_admin(interaction, settings.admin_ids):
            await interaction.response.send_message(ADMIN_ONLY, ephemeral=True)
            return
        preview = reaper.preview()
        embed = discord.Embed(title="🧹 Scrim Cleanup", color=0xFFA500)
        embed.add_field(
            name="📊 Current Status",
            value=f"**Active Scrims:** {len(preview.active)}\n**Expired Scrims:** {len(preview.expired)}",
            inline=False,
        )
        if not preview.expired:
            embed.description = "✅ No expired scrims found. All active scrims are still valid."
            embed.colour = discord.Colour(0x00FF00)
            await interaction.response.send_message(embed=embed, ephemeral=True)
            return
        lines = [
            f"{n}. **{s.team_name}** - {s.scheduled_date} (Posted: {s.created_at:%d/%m/%Y})"
            for n, s in enumerate(preview.expired[:10], start=1)
        ]
        more = len(preview.expired) - 10
        embed.description = (
            f"Found {len(preview.expired)} expired scrim(s) that can be cleaned up:\n\n"
            + "\n".join(lines)
            + (f"\n\n*...and {more} more*" if more > 0 else "")
        )
        await interaction.response.send_message(
            embed=embed, view=CleanupConfirmView(reaper, len(preview.expired)), ephemeral=True
        )

    # ------------------------------------------------------------------
    # Alerts
    alert = app_commands.Group(name="alert", description="Manage your scrim alert notifications")

    @alert.command(name="on", description="Enable scrim alerts")
    async def alert_on(interaction: discord.Interaction) -> None:
        store.set_alert_preference(interaction.user.id, True)
        embed = discord.Embed(
            title="🔔 Alerts Enabled",
            description="You will now receive DM notifications when new scrim requests are posted!",
            color=0x00FF00,
        )
        embed.set_footer(text="Make sure your DMs are open to receive notifications")
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @alert.command(name="off", description="Disable scrim alerts")
    async def alert_off(interaction: discord.Interaction) -> None:
        store.set_alert_preference(interaction.user.id, False)
        embed = discord.Embed(
            title="🔕 Alerts Disabled",
            description="You will no longer receive DM notifications for new scrim requests.",
            color=0xFF6B35,
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @alert.command(name="status", description="Check your current alert status")
    async def alert_status(interaction: discord.Interaction) -> None:
        pref = store.get_alert_preference(interaction.user.id)
        enabled = bool(pref and pref.enabled)
        embed = discord.Embed(
            title="📊 Alert Status",
            description=f"Your scrim alerts are currently **{'ENABLED' if enabled else 'DISABLED'}**",
            color=0x00FF00 if enabled else 0x6C757D,
        )
        embed.add_field(
            name="⚙️ Change Settings",
            value="Use `/alert off` to disable" if enabled else "Use `/alert on` to enable",
            inline=False,
        )
        embed.set_footer(
            text=f"Last updated: {pref.updated_at:%d/%m/%Y}" if pref else "Default setting"
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    tree.add_command(alert)

    # ------------------------------------------------------------------
    # Profiles
    profile = app_commands.Group(
        name="profile", description="Manage your team profile for quick scrim creation"
    )

    @profile.command(name="view", description="View your current profile")
    async def profile_view(interaction: discord.Interaction) -> None:
        saved = store.get_profile(interaction.user.id)
        if saved is None:
            embed = discord.Embed(
                title="👤 No Profile Found",
                description="You don't have a saved profile yet. Create one to speed up scrim creation!",
                color=0xFFA500,
            )
        else:
            embed = discord.Embed(title="👤 Your Team Profile", color=0x0099FF)
            embed.add_field(name="🏷️ Team Name", value=saved.team_name)
            embed.add_field(name="🎯 Division", value=saved.division)
            embed.add_field(name="🔄 Last Updated", value=f"{saved.updated_at:%d/%m/%Y}")
            embed.set_footer(text="Use /profile edit to update your information")
        await interaction.response.send_message(
            embed=embed, view=ProfileActionsView(wizard, saved is not None), ephemeral=True
        )

    @profile.command(name="edit", description="Edit your team profile")
    async def profile_edit(interaction: discord.Interaction) -> None:
        await interaction.response.send_modal(ProfileModal(store, wizard, interaction.user.id))

    tree.add_command(profile)

    # ------------------------------------------------------------------
    # Map catalog (admin)
    editmaps = app_commands.Group(
        name="editmaps",
        description="Manage the available maps for scrims (Admin only)",
        default_permissions=discord.Permissions(administrator=True),
    )

    @editmaps.command(name="add", description="Add a new map")
    @app_commands.describe(mapname="Name of the map to add")
    async def editmaps_add(interaction: discord.Interaction, mapname: str) -> None:
        if not is_admin(interaction, settings.admin_ids):
            await interaction.response.send_message(ADMIN_ONLY, ephemeral=True)
            return
        try:
            store.add_map(mapname)
        except ScrimError as exc:
            await interaction.response.send_message(f"❌ {exc}", ephemeral=True)
            return
        await interaction.response.send_message(
            f"✅ Added **{mapname.strip()}**. {len(store.maps)} map(s) available.", ephemeral=True
        )

    @editmaps.command(name="remove", description="Remove a map")
    @app_commands.describe(mapname="Name of the map to remove")
    async def editmaps_remove(interaction: discord.Interaction, mapname: str) -> None:
        if not is_admin(interaction, settings.admin_ids):
            await interaction.response.send_message(ADMIN_ONLY, ephemeral=True)
            return
        if not store.remove_map(mapname):
            await interaction.response.send_message(
                f'❌ Map "{mapname}" not found in the list.', ephemeral=True
            )
            return
        await interaction.response.send_message(f"🗑️ Removed **{mapname.strip()}**.", ephemeral=True)

    @editmaps_remove.autocomplete("mapname")
    async def editmaps_remove_autocomplete(
        interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        current_lower = current.lower()
        return [
            app_commands.Choice(name=name, value=name)
            for name in store.list_maps()
            if current_lower in name.lower()
        ][:25]

    @editmaps.command(name="list", description="List all available maps")
    async def editmaps_list(interaction: discord.Interaction) -> None:
        maps = store.list_maps()
        embed = discord.Embed(
            title="🗺️ Available Maps",
            description="\n".join(f"• {m}" for m in maps) or "No maps configured.",
            color=0x0099FF,
        )
        embed.set_footer(text=f"Total: {len(maps)} map(s)")
        await interaction.response.send_message(embed=embed, ephemeral=True)

    tree.add_command(editmaps)

    # ------------------------------------------------------------------
    # Setup (admin)
    setup = app_commands.Group(
        name="setup",
        description="Configure bot settings (Admin only)",
        default_permissions=discord.Permissions(administrator=True),
    )

    @setup.command(name="channel", description="Set the channel scrim requests are posted to")
    @app_commands.describe(channel="Channel for scrim posts")
    async def setup_channel(interaction: discord.Interaction, channel: discord.TextChannel) -> None:
        if not is_admin(interaction, settings.admin_ids):
            await interaction.response.send_message(ADMIN_ONLY, ephemeral=True)
            return
        store.set_setting(SCRIM_CHANNEL_KEY, channel.id)
        log.info("Scrim channel set to %s by %s", channel.id, interaction.user.id)
        await interaction.response.send_message(
            f"✅ Scrim requests will now be posted in {channel.mention}.", ephemeral=True
        )

    @setup.command(name="info", description="Show current bot settings")
    async def setup_info(interaction: discord.Interaction) -> None:
        channel_id = store.scrim_channel_id(settings.scrim_channel_id)
        embed = discord.Embed(title="⚙️ Bot Configuration", color=0x0099FF)
        embed.add_field(
            name="📍 Scrim Channel",
            value=f"<#{channel_id}>" if channel_id else "Not configured",
            inline=False,
        )
        embed.add_field(name="🗺️ Maps", value=str(len(store.maps)))
        embed.add_field(name="📋 Active Scrims", value=str(len(store.list_active())))
        embed.add_field(
            name="🧹 Cleanup Interval", value=f"Every {settings.cleanup_interval_hours:g} hour(s)"
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    tree.add_command(setup)
