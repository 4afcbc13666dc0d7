# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                     CALENDAR ANNOUNCER ACCESS GATE                       ║
# ║    Decides who may change configuration or open the reminder picker       ║
# ╚════════════════════════════════════════════════════════════════════════════╝

from typing import Optional

from utils.logging import logger

DENIED_MESSAGE = "⚠️ You do not have permission to use this command."

# --- is_authorized ---
# Administrators only until an access role is configured; afterwards only
# holders of that role.
# Args:
#     member: a discord.Member (anything with guild_permissions and roles)
#     access_role_id: the configured access role, or None
def is_authorized(member, access_role_id: Optional[int]) -> bool:
    if member is None:
        return False
    if access_role_id is None:
        permissions = getattr(member, "guild_permissions", None)
        return bool(permissions and permissions.administrator)
    return any(getattr(role, "id", None) == int(access_role_id) for role in getattr(member, "roles", []))

# --- require_access ---
# Checks the invoking member of a text command and replies with a rejection
# when access is denied.
# Returns: True if the command may proceed.
async def require_access(ctx, state) -> bool:
    if is_authorized(ctx.author, state.get_config("access_role_id")):
        return True
    logger.info(f"Denied command '{getattr(ctx, 'invoked_with', '?')}' for user {ctx.author}")
    await ctx.send(DENIED_MESSAGE)
    return False
