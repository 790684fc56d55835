#!/usr/bin/env python
from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

from admission_frontend.core.errors import AdmissionsError
from admission_frontend.core.log_filter import configure_logging
from admission_frontend.services.actors import admin_actor
from admission_frontend.services.admissions_client import AdmissionsClient
from admission_frontend.services.census_service import CensusService

log = logging.getLogger(__name__)


async def run(client: Optional[AdmissionsClient] = None) -> int:
    async with client or AdmissionsClient() as client:
        try:
            await client.authenticate_as(admin_actor())
            result = await CensusService(client).conduct_census()
        except AdmissionsError as e:
            log.error("Failed to conduct census: %s", e)
            return 1
    print(result)
    return 0


def main():
    configure_logging()
    log.info("Conducting census...")
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
