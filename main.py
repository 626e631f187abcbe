#This file is for development purposes only

import logging
import time

from mantis_client_impl import get_client
from mantis_client_interface import MantisClientError


def main():
    logging.basicConfig(level=logging.INFO)
    client = get_client(interactive=True)

    try:
        client.validate()
        print(f"Connected to MantisBT {client.get_mantis_version()} at {client.mantis_url}")
    except MantisClientError as e:
        print(f"Error connecting to MantisBT: {e}")
        return

    project_name = input("Project name: ").strip()
    issue = {
        "project": {"name": project_name},
        "category": "General",
        "summary": f"Sample Summary {int(time.time())}",
        "description": f"Sample Description {int(time.time())}",
    }

    try:
        issue_id = client.add_issue(issue)
        print(f"- created {client.get_issue(issue_id)}")
    except MantisClientError as e:
        print(f"Error creating issue: {e}")

if __name__ == "__main__":
    main()
