"""
Registration Demo Script

Runs the two-step registration flow from the command line, using image
files instead of the webcam:

1. Send the ID photo, receive a VID number
2. Send the face photo for that VID number
3. Print the registration status

Face verification is simulated and fails at random, so step 2 can be
retried with --face-retries.

Usage:
    # Against a running backend (python -m api.app)
    python scripts/demo_registration.py --id-image id.jpg --face-image face.jpg

    # Without a backend (registration service runs in-process)
    python scripts/demo_registration.py --id-image id.jpg --face-image face.jpg --mock
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from frontend.api_client import RegistrationAPIClient, ConnectionMode, APIError
from frontend.components.webcam_capture import read_image_file, frame_to_data_url

DEFAULT_API_URL = "http://localhost:3001/api"


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Two-step VID registration with image files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--id-image", type=str, required=True,
        help="Path to the ID photo",
    )
    parser.add_argument(
        "--face-image", type=str, required=True,
        help="Path to the face photo",
    )
    parser.add_argument(
        "--api-url", type=str, default=DEFAULT_API_URL,
        help=f"Registration API base URL (default: {DEFAULT_API_URL})",
    )
    parser.add_argument(
        "--mock", action="store_true",
        help="Run the registration service in-process instead of calling the API",
    )
    parser.add_argument(
        "--face-retries", type=int, default=3,
        help="Attempts for the face step when verification fails (default: 3)",
    )
    parser.add_argument(
        "--user-login", type=str, default="demo-user",
        help="Login name sent with each request (default: demo-user)",
    )
    args = parser.parse_args()

    try:
        id_image = frame_to_data_url(read_image_file(args.id_image), rgb=False)
        face_image = frame_to_data_url(read_image_file(args.face_image), rgb=False)
    except (FileNotFoundError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 1

    mode = ConnectionMode.MOCK if args.mock else ConnectionMode.LIVE
    client = RegistrationAPIClient(base_url=args.api_url, mode=mode, user_login=args.user_login)

    print("=" * 60)
    print(f" VID Registration ({mode.value} mode)")
    print("=" * 60)

    try:
        print("\n1. Registering ID photo...")
        vid_number = client.register_id(id_image)
        print(f"   VID number: {vid_number}")

        print("\n2. Registering face photo...")
        for attempt in range(1, args.face_retries + 1):
            try:
                message = client.register_face(face_image, vid_number)
                print(f"   {message}")
                break
            except APIError as e:
                print(f"   Attempt {attempt}/{args.face_retries} failed: {e.message}")
                # Only verification failures are worth retrying
                if e.status_code != 400 or "verification" not in e.message.lower():
                    return 1
        else:
            return 1

        print("\n3. Registration status...")
        status = client.get_registration(vid_number)
        print(f"   VID number:    {status['vidNumber']}")
        print(f"   Created at:    {status['timestamp']}")
        print(f"   Face verified: {status['faceVerified']}")

    except APIError as e:
        print(f"[ERROR] {e.message}")
        return 1
    finally:
        client.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
