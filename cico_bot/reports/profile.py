# cico_bot/reports/profile.py
"""Student profile card (legacy Markdown)."""

from cico_bot.messaging.markdown import escape_markdown
from cico_bot.models.records import StudentProfile


def render_profile(profile: StudentProfile) -> str:
    fees = escape_markdown(profile.course.course_fees) if profile.course else "N/A"
    status = "🟢 Active" if profile.active else "🔴 Inactive"

    return (
        "👤 *Student Profile*\n\n"
        f"🆔 *User ID:* `{escape_markdown(profile.user_id)}`\n"
        f"📛 *Name:* {escape_markdown(profile.full_name)}\n"
        f"🎂 *DOB:* {escape_markdown(profile.dob)}\n"
        f"📱 *Mobile:* `{escape_markdown(profile.mobile)}`\n"
        f"📧 *Email:* `{escape_markdown(profile.email)}`\n"
        f"🎓 *Course:* {escape_markdown(profile.current_course)}\n"
        f"📚 *Applied For:* {escape_markdown(profile.applied_course)}\n"
        f"💰 *Fees:* ₹{fees}\n"
        f"📅 *Joined:* {escape_markdown(profile.join_date)}\n"
        f"✨ *Status:* {status}"
    )
