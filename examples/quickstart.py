# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import asyncio
import logging
import sys
from pathlib import Path

# Add src to PYTHONPATH for local runs
sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from ssrs_sdk import ConnectionConfig, CredentialMode, Credentials, ReportServerClient
from ssrs_sdk.core.errors import NotFoundError, ReportServerError


def log_call(call: str) -> None:
	print({"call": call})


def build_config() -> ConnectionConfig:
	entered = input("Enter report server URL (e.g. https://ssrs.contoso.com): ").strip()
	if not entered:
		print("No URL entered; exiting.")
		sys.exit(1)
	username = input("Username (leave empty for integrated security): ").strip()
	if not username:
		return ConnectionConfig.build(entered, CredentialMode.INTEGRATED)
	domain = input("Domain (optional): ").strip() or None
	password = input("Password: ")
	session_choice = input("Use session login (custom security)? (y/N): ").strip() or "n"
	mode = CredentialMode.SESSION if session_choice.lower() in ("y", "yes") else CredentialMode.EXPLICIT
	return ConnectionConfig.build(entered, mode, Credentials(username, password, domain))


async def main() -> None:
	config = build_config()
	async with ReportServerClient(config) as client:
		if config.credential_mode is CredentialMode.SESSION:
			log_call("client.authenticate_session()")
			print(await client.authenticate_session())

		log_call("client.reports.list()")
		reports = await client.reports.list()
		print(f"Found {len(reports)} reports:")
		for report in reports:
			print(f"- {report.name} (ID: {report.id})")

		log_call("client.reports.list(filter=\"contains(Name,'Sales')\")")
		for report in await client.reports.list(filter="contains(Name,'Sales')"):
			print({"name": report.name, "path": report.path})

		log_call("client.folders.create_folder('Test Folder')")
		folder = await client.folders.create_folder("Test Folder")
		print({"created": folder.path, "id": folder.id})

		log_call("client.folders.delete(folder.id)")
		try:
			print({"deleted": await client.folders.delete(folder.id)})
		except NotFoundError:
			print("Folder already gone.")

		if client.session_token is not None:
			log_call("client.logout()")
			await client.logout()


if __name__ == "__main__":
	logging.basicConfig(level=logging.INFO)
	try:
		asyncio.run(main())
	except ReportServerError as ex:
		print(f"Error: {ex.message}")
		print(ex.to_dict())
		sys.exit(1)
