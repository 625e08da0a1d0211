# run_live.py
import sys
import json
import logging

from dotenv import load_dotenv

# Import the main handler function
from lambdas.log_summary.app import handler


def run_live(run_date: str = None):
    """Executes the log summary handler against the bucket configured in .env, using your live AWS credentials."""
    print("--- Starting LIVE Run of log_summary Lambda ---")
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # The handler expects an API Gateway event; the date parameter is optional.
    event = {"queryStringParameters": {"date": run_date}} if run_date else {}

    result = handler(event, {})
    print("--- Lambda handler execution finished ---")
    print(json.dumps(result, indent=2))
    return result


if __name__ == "__main__":
    response = run_live(sys.argv[1] if len(sys.argv) > 1 else None)
    sys.exit(0 if response["statusCode"] == 200 else 1)
