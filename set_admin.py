"""
Seed roles, permissions and the first SUPER_ADMIN account.

Usage: python set_admin.py   (reads DB_* settings from the environment / .env)
"""
import asyncio
import getpass

from sqlalchemy import select

from bulky.app.core.constants import ROLE_ADMIN, ROLE_PERMISSIONS, ROLE_STAFF, ROLE_SUPER_ADMIN
from bulky.app.core.database import async_session
from bulky.app.core.security import hash_password
from bulky.app.core.validation import validate_password_strength
from bulky.app.models.auth import Admin, Permission, Role

ROLE_NAMES = {
    ROLE_SUPER_ADMIN: "Super Admin",
    ROLE_ADMIN: "Admin",
    ROLE_STAFF: "Staff",
}


async def seed_roles(session) -> dict[str, Role]:
    """Create missing permissions and roles; existing rows get their permission set refreshed."""
    existing = {p.kode: p for p in (await session.execute(select(Permission))).scalars().all()}
    for kodes in ROLE_PERMISSIONS.values():
        for kode in kodes:
            if kode not in existing:
                modul, action = kode.split(":")
                existing[kode] = Permission(kode=kode, nama=f"{action} {modul}", modul=modul)
                session.add(existing[kode])

    roles = {r.kode: r for r in (await session.execute(select(Role))).scalars().all()}
    for kode, nama in ROLE_NAMES.items():
        role = roles.get(kode)
        if role is None:
            role = Role(kode=kode, nama=nama, is_active=True)
            session.add(role)
            roles[kode] = role
        role.permissions = [existing[p] for p in ROLE_PERMISSIONS[kode]]
    await session.flush()
    return roles


async def make_super_admin(nama: str, email: str, password: str) -> None:
    async with async_session() as session:
        roles = await seed_roles(session)
        email = email.strip().lower()
        result = await session.execute(select(Admin).where(Admin.email == email, Admin.alive()))
        admin = result.scalar_one_or_none()

        if admin:
            admin.role = roles[ROLE_SUPER_ADMIN]
            admin.is_active = True
            print(f"Admin {email} is now SUPER_ADMIN.")
        else:
            session.add(Admin(
                nama=nama,
                email=email,
                password=hash_password(password),
                role=roles[ROLE_SUPER_ADMIN],
            ))
            print(f"SUPER_ADMIN {email} created.")

        await session.commit()


if __name__ == "__main__":
    nama = input("Nama: ").strip() or "Super Admin"
    email = input("Email: ")
    password = getpass.getpass("Password: ")
    ok, errors = validate_password_strength(password)
    if not ok:
        raise SystemExit("; ".join(errors))
    asyncio.run(make_super_admin(nama, email, password))
