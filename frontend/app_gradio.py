"""
Gradio-based capture client for the VID Registration Demo.

This is the main entry point for the frontend application.
Run with: python -m frontend.app_gradio

The user grants camera access, takes an ID photo, then a face photo.
Each photo is sent to the registration API; errors are shown inline and
the user can retry the same step.
"""

import json
import gradio as gr
import numpy as np
from typing import Optional

from core.config import get_frontend_config
from frontend.api_client import get_api_client, ConnectionMode
from frontend.components.webcam_capture import CaptureConfig, frame_to_data_url
from frontend.components.registration_wizard import (
    RegistrationWizard,
    InvalidTransition,
    Step,
    CameraUnavailable,
    Submitting,
    current_utc_time,
)
from frontend.components.registration_panel import RegistrationPanel, PanelConfig


# ============================================================
# Global State
# ============================================================
frontend_config = get_frontend_config()
capture_config = CaptureConfig.from_dict(frontend_config.get("capture"))
panel = RegistrationPanel(PanelConfig(user_login=frontend_config.get("user_login", "demo-user")))


# Runs in the browser: asks for camera access and reports the outcome as
# [error name or "granted", error message]. The stream is released right away;
# the webcam component opens its own.
PERMISSION_PROBE_JS = """
async () => {
    try {
        const stream = await navigator.mediaDevices.getUserMedia({
            audio: false,
            video: %s,
        });
        stream.getTracks().forEach((track) => track.stop());
        return ["granted", ""];
    } catch (err) {
        return [err.name || "Error", err.message || ""];
    }
}
""" % json.dumps(capture_config.video_constraints())


# ============================================================
# Rendering
# ============================================================

def render(wizard: RegistrationWizard, clear_frame: bool = False):
    """
    Map the wizard state to component updates.

    Returns updates in the order of the outputs list built in create_demo:
    user_info, heading, webcam, camera_error, retry_btn, capture_btn,
    error_message, success_message.
    """
    state = wizard.state
    camera_unavailable = isinstance(state, CameraUnavailable)
    show_camera = not wizard.is_done and not camera_unavailable
    show_capture = wizard.has_permission is True and not wizard.is_done

    webcam_update = gr.update(visible=show_camera)
    if clear_frame:
        webcam_update = gr.update(visible=show_camera, value=None)

    return (
        panel.format_user_info(current_utc_time()),
        panel.format_heading(state),
        webcam_update,
        gr.update(value=panel.format_error(state), visible=camera_unavailable),
        gr.update(visible=camera_unavailable),
        gr.update(
            value=panel.capture_button_label(state),
            interactive=wizard.can_capture,
            visible=show_capture,
        ),
        gr.update(
            value=panel.format_error(state),
            visible=show_capture and not isinstance(state, Submitting),
        ),
        gr.update(value=panel.format_success(state), visible=wizard.is_done),
    )


# ============================================================
# Camera Permission
# ============================================================

def apply_permission_result(wizard: RegistrationWizard, error_name: str, message: str):
    """Feed the browser's getUserMedia outcome into the wizard."""
    if wizard.is_done:
        return
    if error_name == "granted":
        wizard.permission_granted()
    else:
        wizard.permission_denied(error_name, message)


def on_permission_result(error_name: str, message: str, wizard: RegistrationWizard):
    """Called after the permission probe ran on page load."""
    apply_permission_result(wizard, error_name, message)
    return (wizard, *render(wizard))


def on_retry_camera(error_name: str, message: str, wizard: RegistrationWizard):
    """Reset the permission state and apply the result of a new probe."""
    if isinstance(wizard.state, CameraUnavailable):
        wizard.retry_permission()
    apply_permission_result(wizard, error_name, message)
    return (wizard, *render(wizard))


def on_start_over(error_name: str, message: str, wizard: RegistrationWizard):
    """Begin a new registration from the ID step."""
    wizard.reset()
    apply_permission_result(wizard, error_name, message)
    return (wizard, *render(wizard, clear_frame=True))


# ============================================================
# Capture
# ============================================================

def begin_capture(wizard: RegistrationWizard):
    """Lock the capture button while the photo is being submitted."""
    try:
        wizard.start_capture()
    except InvalidTransition as e:
        print(f"[app_gradio] Capture ignored: {e}")
    return (wizard, *render(wizard))


def submit_capture(frame: Optional[np.ndarray], wizard: RegistrationWizard):
    """
    Send the captured photo for the current step to the registration API.
    """
    if not isinstance(wizard.state, Submitting):
        return (wizard, *render(wizard))

    if frame is None:
        wizard.capture_failed("Failed to capture image. Please try again.")
        return (wizard, *render(wizard))

    try:
        image = frame_to_data_url(frame, quality=capture_config.jpeg_quality)
    except ValueError as e:
        print(f"[app_gradio] Frame encoding failed: {e}")
        wizard.capture_failed("Failed to capture image. Please try again.")
        return (wizard, *render(wizard))

    api_client = get_api_client()
    try:
        if wizard.step == Step.ID:
            vid_number = api_client.register_id(image)
            wizard.id_registered(vid_number)
        else:
            api_client.register_face(image, wizard.vid_number)
            wizard.face_registered()
    except Exception as e:
        print(f"[app_gradio] Error: {e}")
        wizard.request_failed(getattr(e, "message", None) or str(e))
        return (wizard, *render(wizard))

    return (wizard, *render(wizard, clear_frame=True))


def get_connection_status() -> str:
    """Get current connection status message."""
    if get_api_client().mode == ConnectionMode.LIVE:
        return "**Status**: 🟢 Connected to backend (LIVE mode)"
    return "**Status**: 🟡 Demo mode (backend not connected)"


# ============================================================
# Build Gradio Interface
# ============================================================

def create_demo():
    """Create the Gradio registration interface."""

    with gr.Blocks(title="VID Registration") as demo:

        gr.Markdown("""
        # 🪪 VID Registration

        Take a photo of your ID, then a photo of your face.
        """)

        gr.Markdown(get_connection_status())
        user_info = gr.Markdown(panel.format_user_info(current_utc_time()))

        wizard_state = gr.State(RegistrationWizard())

        # Filled in by the permission probe running in the browser
        permission_name = gr.Textbox(visible=False)
        permission_message = gr.Textbox(visible=False)

        heading = gr.Markdown("## Take ID Photo")

        webcam = gr.Image(
            label="Camera",
            sources=["webcam"],
            type="numpy",
            streaming=False,
            width=capture_config.width,
            height=capture_config.height,
        )

        camera_error = gr.Markdown(visible=False)
        retry_btn = gr.Button("🔄 Retry Camera Access", visible=False)

        capture_btn = gr.Button("Capture Photo", variant="primary", visible=False)
        error_message = gr.Markdown(visible=False)
        success_message = gr.Markdown(visible=False)

        start_over_btn = gr.Button("Start Over", variant="secondary", size="sm")

        render_outputs = [
            user_info,
            heading,
            webcam,
            camera_error,
            retry_btn,
            capture_btn,
            error_message,
            success_message,
        ]
        permission_inputs = [permission_name, permission_message, wizard_state]

        # Event handlers
        demo.load(
            fn=None,
            inputs=None,
            outputs=[permission_name, permission_message],
            js=PERMISSION_PROBE_JS,
        ).then(
            fn=on_permission_result,
            inputs=permission_inputs,
            outputs=[wizard_state, *render_outputs],
        )

        retry_btn.click(
            fn=None,
            inputs=None,
            outputs=[permission_name, permission_message],
            js=PERMISSION_PROBE_JS,
        ).then(
            fn=on_retry_camera,
            inputs=permission_inputs,
            outputs=[wizard_state, *render_outputs],
        )

        start_over_btn.click(
            fn=None,
            inputs=None,
            outputs=[permission_name, permission_message],
            js=PERMISSION_PROBE_JS,
        ).then(
            fn=on_start_over,
            inputs=permission_inputs,
            outputs=[wizard_state, *render_outputs],
        )

        capture_btn.click(
            fn=begin_capture,
            inputs=[wizard_state],
            outputs=[wizard_state, *render_outputs],
        ).then(
            fn=submit_capture,
            inputs=[webcam, wizard_state],
            outputs=[wizard_state, *render_outputs],
        )

        gr.Markdown("""
        ---
        **Tip**: Start the backend with `python -m api.app` to enable live mode.
        """)

    return demo


# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        server_name="0.0.0.0",
        server_port=int(frontend_config.get("server_port", 7860)),
        show_error=True,
    )
