import asyncio
import os
import logging
from datetime import datetime

import discord
from discord.ext import commands
from dotenv import load_dotenv

from summary_report import chunked_report_messages, format_summary
from tasks import CompilationError, compile_checklists
from taxonomy_order import TaxonomyError, TaxonomyOrder

load_dotenv()
TOKEN = os.getenv("DISCORD_TOKEN")
LOG_FILE = os.getenv("EBIRD_COMPILER_LOG_FILE", "eBird_Compiler_Bot.log")

# Create a logger object
logger = logging.getLogger("eBird_Compiler_Bot")

# Create formatter
formatter = logging.Formatter(
    fmt="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

# Console handler
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)

# File handler
file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
file_handler.setFormatter(formatter)

# Handlers go on the root logger so the compiler modules' loggers reach them too
root_logger = logging.getLogger()
root_logger.setLevel(logging.DEBUG)
root_logger.addHandler(console_handler)
root_logger.addHandler(file_handler)

# Library chatter stays out of the bot log
logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("discord").setLevel(logging.INFO)

# Discord bot setup
intents = discord.Intents.default()
intents.message_content = True

bot = commands.Bot(command_prefix='!', case_insensitive=True, intents=intents)
bot.taxonomy = None


@bot.event
async def on_ready():
    logger.info(f"Logged in as {bot.user}")

    if bot.taxonomy is None:
        try:
            bot.taxonomy = await asyncio.to_thread(TaxonomyOrder.load)
        except TaxonomyError as e:
            logger.error(f"Failed to load taxonomy: {e}")


async def send_warnings(channel, warnings: list[str]):
    if not warnings:
        return
    embed = discord.Embed(title="Warning:", description="\n".join(warnings), color=0xffff00)
    await channel.send(embed=embed)


@bot.command(name="compile")
async def compile_command(ctx, *arg):
    logger.info(f"Called compile @ {datetime.now()} for {len(arg)} checklist(s) from {ctx.message.author.name}")
    if len(arg) < 1:
        embed = discord.Embed(title="Example:", description="If you send me a message with the text: \n**!compile S123456789 https://ebird.org/checklist/S987654321**\n\n I will reply with a summary of both checklists.", color=0xFFD700)
        await ctx.send(embed=embed, silent=True)
        return

    if bot.taxonomy is None:
        await ctx.send("Taxonomy is not loaded; cannot compile checklists.")
        return

    # Retrieval blocks and is rate limited, so keep it off the event loop
    try:
        async with ctx.typing():
            result = await asyncio.to_thread(compile_checklists, ' '.join(arg), bot.taxonomy)
    except CompilationError as e:
        logger.warning(f"Compile failed: {e}")
        await ctx.send(f"Error: {e}")
        return

    for msg in chunked_report_messages(format_summary(result.summary)):
        await ctx.send(msg, silent=True)
    await send_warnings(ctx.channel, result.warnings)


@bot.command()
async def taxon(ctx, *arg):
    logger.info(f"Called taxon @ {datetime.now()} for {arg} from {ctx.message.author.name}")
    if len(arg) < 1:
        embed = discord.Embed(title="Example:", description="If you send me a message with the text: \n**!taxon American Dipper** \n\nI will respond with its taxonomic order, category and species code.", color=0xFFD700)
        await ctx.send(embed=embed, silent=True)
        return
    if bot.taxonomy is None:
        await ctx.send("Taxonomy is not loaded.")
        return

    name = ' '.join(arg)
    entry = bot.taxonomy.get_entry(name) or bot.taxonomy.find_by_species_code(name)
    if not entry:
        await ctx.send('No matching taxon found.')
        return
    await ctx.send(f"{entry.common_name} ({entry.scientific_name}): #{entry.sequence}, {entry.category.value}, code {entry.species_code}")


if __name__ == "__main__":
    if not TOKEN:
        raise RuntimeError("DISCORD_TOKEN not set in .env")
    # Our root handlers already cover discord's records
    bot.run(TOKEN, log_handler=None)
