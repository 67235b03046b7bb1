"""Localized user-facing messages.

All text that reaches an end user is looked up here, so classified errors are
display-ready at the point they are raised. Two catalogs ship: English
(default) and Vietnamese.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class MessageCatalog:
    """Message strings for a single locale."""

    locale: str

    # Category messages
    no_credentials: str
    auth: str
    quota: str
    unavailable: str
    internal: str
    unknown: str
    all_credentials_exhausted: str  # formatted with {count}

    # Per-operation defaults (used when nothing more specific is known)
    translate_failed: str  # formatted with {language}
    text_to_image_failed: str
    elaborate_failed: str
    edit_failed: str
    combine_failed: str
    video_failed: str
    video_prompt_failed: str

    # Content rejection
    no_image_generated: str
    image_rejected: str  # formatted with {reason}
    no_text_generated: str
    no_video_links: str

    # Video progress
    video_starting: str
    video_submitted: str
    video_checking: str
    video_done: str

    # Messages starting with one of these are already user-facing
    passthrough_prefixes: Tuple[str, ...] = ()
    language_names: Dict[str, str] = field(default_factory=dict)

    def language_name(self, tag: str) -> str:
        """Return the display name for a language tag, or the tag itself."""
        return self.language_names.get(tag, tag)

    def exhausted(self, count: int) -> str:
        return self.all_credentials_exhausted.format(count=count)

    def is_user_facing(self, message: str) -> bool:
        return message.startswith(self.passthrough_prefixes)


ENGLISH = MessageCatalog(
    locale="en",
    no_credentials="Please enter your API key to use the application.",
    auth="Authentication error: the API key is invalid or has been revoked. Please check it again.",
    quota=(
        "Quota error: you have exceeded your API usage quota. "
        "Please check your plan and billing details."
    ),
    unavailable="The AI service is currently overloaded or unavailable. Please try again in a few minutes.",
    internal="The AI server encountered an internal error. Please try again later.",
    unknown="Unknown error",
    all_credentials_exhausted=(
        "All {count} API keys you provided have temporarily reached their usage limit.\n\n"
        "**How to fix it:**\n"
        "1. **Wait a moment:** limits usually reset every minute. Please wait a little and try again.\n"
        '2. **Add new keys:** add API keys from other Google accounts under "Manage API keys".'
    ),
    translate_failed="Translating the text to {language} failed.",
    text_to_image_failed="Image generation from text failed. Please try again.",
    elaborate_failed="Creative prompt generation failed. Please try again.",
    edit_failed=(
        "Image editing failed. Your request may have been blocked. "
        "Please adjust the prompt or the image."
    ),
    combine_failed=(
        "Image generation failed. Your request may have been blocked. "
        "Please adjust the prompt or the images."
    ),
    video_failed="Video generation failed. Please try again.",
    video_prompt_failed="Analyzing the image to create a video prompt failed.",
    no_image_generated="No image was generated. The request may have been rejected by the safety policy.",
    image_rejected="Image generation failed: {reason}",
    no_text_generated="The model returned no text. The request may have been rejected by the safety policy.",
    no_video_links="Video generation finished, but no download link was found.",
    video_starting="Starting the video generation request...",
    video_submitted="Request sent, processing. This can take a few minutes...",
    video_checking="Checking progress...",
    video_done="The video was generated successfully!",
    passthrough_prefixes=(
        "Error",
        "Authentication error",
        "Quota error",
        "Service",
        "Image generation",
        "Image editing",
    ),
    language_names={"en": "English", "vi": "Vietnamese"},
)


VIETNAMESE = MessageCatalog(
    locale="vi",
    no_credentials="Vui lòng nhập Khóa API của bạn để sử dụng ứng dụng.",
    auth="Lỗi xác thực: Khóa API không hợp lệ hoặc đã bị thu hồi. Vui lòng kiểm tra lại.",
    quota=(
        "Lỗi hạn ngạch: Bạn đã vượt quá hạn ngạch sử dụng API. "
        "Vui lòng kiểm tra gói dịch vụ và thông tin thanh toán của bạn."
    ),
    unavailable="Dịch vụ AI hiện đang quá tải hoặc không khả dụng. Vui lòng thử lại sau ít phút.",
    internal="Máy chủ AI đã gặp lỗi nội bộ. Vui lòng thử lại sau.",
    unknown="Lỗi không xác định",
    all_credentials_exhausted=(
        "Tất cả {count} Khóa API bạn cung cấp đều đã tạm thời đạt đến giới hạn sử dụng.\n\n"
        "**Cách khắc phục:**\n"
        "1. **Đợi một lúc:** Giới hạn thường được đặt lại sau mỗi phút. Vui lòng chờ một chút rồi thử lại.\n"
        '2. **Thêm khóa mới:** Thêm các Khóa API từ các tài khoản Google khác vào phần "Quản lý Khóa API".'
    ),
    translate_failed="Dịch văn bản sang {language} thất bại.",
    text_to_image_failed="Tạo ảnh từ văn bản thất bại. Vui lòng thử lại.",
    elaborate_failed="Tạo prompt sáng tạo thất bại. Vui lòng thử lại.",
    edit_failed=(
        "Chỉnh sửa ảnh thất bại. Yêu cầu của bạn có thể đã bị chặn. "
        "Vui lòng điều chỉnh lại prompt hoặc hình ảnh."
    ),
    combine_failed=(
        "Tạo ảnh thất bại. Yêu cầu của bạn có thể đã bị chặn. "
        "Vui lòng điều chỉnh lại prompt hoặc hình ảnh."
    ),
    video_failed="Tạo video thất bại. Vui lòng thử lại.",
    video_prompt_failed="Phân tích ảnh để tạo prompt video thất bại.",
    no_image_generated="Không có ảnh nào được tạo. Yêu cầu có thể đã bị từ chối do chính sách an toàn.",
    image_rejected="Tạo ảnh thất bại: {reason}",
    no_text_generated="Mô hình không trả về văn bản nào. Yêu cầu có thể đã bị từ chối do chính sách an toàn.",
    no_video_links="Tạo video hoàn tất, nhưng không tìm thấy link tải xuống.",
    video_starting="Bắt đầu yêu cầu tạo video...",
    video_submitted="Đã gửi yêu cầu, đang xử lý. Quá trình này có thể mất vài phút...",
    video_checking="Đang kiểm tra tiến độ...",
    video_done="Video đã được tạo thành công!",
    passthrough_prefixes=("Lỗi", "Dịch vụ", "Tạo ảnh", "Chỉnh sửa"),
    language_names={"en": "tiếng Anh", "vi": "tiếng Việt"},
)


CATALOGS: Dict[str, MessageCatalog] = {
    ENGLISH.locale: ENGLISH,
    VIETNAMESE.locale: VIETNAMESE,
}


def get_catalog(locale: str) -> MessageCatalog:
    """Return the catalog for a locale, falling back to English."""
    return CATALOGS.get(locale.lower(), ENGLISH)
