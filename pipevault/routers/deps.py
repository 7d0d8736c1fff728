"""Shared router dependencies."""


from fastapi import Header


async def acting_admin_id(
    x_admin_id: str | None = Header(default=None, alias="X-Admin-Id"),
) -> str | None:
    """Id of the admin performing a write, as sent by the dashboard.

    Membership is checked by the service inside the write transaction; a
    missing header is passed through and rejected there.
    """
    return x_admin_id.strip() if x_admin_id else None
