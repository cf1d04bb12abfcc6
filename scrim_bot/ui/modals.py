from __future__ import annotations

import logging

import discord

from ..core.wizard import BasicInfoDefaults, ScrimWizard
from ..data.store import ScrimStore
from ..errors import ScrimError

log = logging.getLogger("scrim.ui")


class BasicInfoModal(discord.ui.Modal, title="Scrim Request - Basic Info"):
    def __init__(self, wizard: ScrimWizard, defaults: BasicInfoDefaults | None = None) -> None:
        super().__init__()
        self.wizard = wizard
        defaults = defaults or BasicInfoDefaults()
        self.team_name = discord.ui.TextInput(
            label="Team Name",
            style=discord.TextStyle.short,
            required=True,
            max_length=50,
            default=defaults.team_name or None,
        )
        self.division = discord.ui.TextInput(
            label="Division",
            style=discord.TextStyle.short,
            required=True,
            max_length=30,
            default=defaults.division or None,
        )
        self.scheduled_date = discord.ui.TextInput(
            label="Date (DD/MM/YYYY)",
            style=discord.TextStyle.short,
            required=True,
            placeholder="29/08/2025",
        )
        self.scheduled_time = discord.ui.TextInput(
            label="Time (HH:MM AM/PM Timezone)",
            style=discord.TextStyle.short,
            required=True,
            placeholder="7:00 PM ACDT",
        )
        for item in (self.team_name, self.division, self.scheduled_date, self.scheduled_time):
            self.add_item(item)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        from .views import MapSelectView, RetryBasicInfoView

        submitted = (
            self.team_name.value,
            self.division.value,
            self.scheduled_date.value,
            self.scheduled_time.value,
        )
        try:
            chunks = self.wizard.submit_basic_info(interaction.user.id, *submitted)
        except ScrimError as exc:
            retry = RetryBasicInfoView(
                self.wizard, BasicInfoDefaults(submitted[0].strip(), submitted[1].strip())
            )
            await interaction.response.send_message(f"❌ {exc}", view=retry, ephemeral=True)
            return
        embed = discord.Embed(
            title="🗺️ Select Maps",
            description="Choose the maps you want to play (you can select multiple):",
            color=0x0099FF,
        )
        await interaction.response.send_message(
            embed=embed, view=MapSelectView(self.wizard, chunks), ephemeral=True
        )


class ProfileModal(discord.ui.Modal, title="Edit Team Profile"):
    def __init__(self, store: ScrimStore, wizard: ScrimWizard, user_id: int) -> None:
        super().__init__()
        self.store = store
        self.wizard = wizard
        profile = store.get_profile(user_id)
        self.team_name = discord.ui.TextInput(
            label="Team Name",
            required=True,
            max_length=50,
            placeholder="Enter your team name",
            default=profile.team_name if profile else None,
        )
        self.division = discord.ui.TextInput(
            label="Division",
            required=True,
            max_length=30,
            placeholder="e.g., Premier, Main, Advanced, etc.",
            default=profile.division if profile else None,
        )
        self.add_item(self.team_name)
        self.add_item(self.division)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        from .views import QuickScrimView

        try:
            profile = self.store.update_profile(
                interaction.user.id, self.team_name.value, self.division.value
            )
        except ScrimError as exc:
            await interaction.response.send_message(f"❌ {exc}", ephemeral=True)
            return
        except OSError:
            log.exception("Failed to save profile for %s", interaction.user.id)
            await interaction.response.send_message(
                "❌ Failed to save your profile. Please try again.", ephemeral=True
            )
            return
        embed = discord.Embed(
            title="✅ Profile Updated Successfully",
            description="Your team profile has been saved!",
            color=0x00FF00,
        )
        embed.add_field(name="🏷️ Team Name", value=profile.team_name)
        embed.add_field(name="🎯 Division", value=profile.division)
        embed.add_field(
            name="🚀 Quick Scrim Creation",
            value="You can now use your saved profile for faster scrim posting with `/scrim`",
            inline=False,
        )
        await interaction.response.send_message(
            embed=embed, view=QuickScrimView(self.wizard), ephemeral=True
        )
