"""
vision.py

Reads photographed weighing forms with the OpenAI vision API.

Two calls per document:
1. Classification (fruit form or mesh-bag form)
2. Extraction with the prompt for that category

This file:
- Only returns the category and the raw model text
- Does NOT parse or correct the extracted values
- Does NOT contain FastAPI routes
- Does NOT talk to the record table
"""

import io
import base64
from typing import Optional, Tuple
import logging

from openai import OpenAI
from PIL import Image, UnidentifiedImageError  # Used to check uploaded images

from bascula.schemas.weighing import DocumentCategory
from bascula.services.prompts import CLASSIFICATION_PROMPT, extraction_prompt_for

logger = logging.getLogger(__name__)


DATA_URL_PREFIX = "data:"


class VisionExtractorService:
    """
    VisionExtractorService sends a form image to a vision model
    and returns what the model read.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1500,
        classify_max_tokens: int = 50
    ):
        """
        Initialize vision service.

        Parameters:
        - api_key: OpenAI API key
        - model: chat model with image input
        - max_tokens: response limit for the extraction call
        - classify_max_tokens: response limit for the classification call
        """

        logger.info(f"Initializing vision service with model {model}")

        self.client = OpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.classify_max_tokens = classify_max_tokens

    # ------------------------------------------------------------------
    # Image helpers
    # ------------------------------------------------------------------

    @staticmethod
    def to_data_url(image: str) -> str:
        """
        Normalize an image string to a data URL.

        The camera page sends "data:image/jpeg;base64,...". Bare
        base64 strings are accepted too and assumed to be JPEG.
        """

        image = image.strip()

        if image.startswith(DATA_URL_PREFIX):
            return image

        return f"data:image/jpeg;base64,{image}"

    @staticmethod
    def bytes_to_data_url(file_bytes: bytes) -> str:
        """
        Convert uploaded image bytes to a data URL.

        What happens here:
        1. Open the bytes with Pillow to make sure they are an image
        2. Use the detected format for the MIME type
        3. Base64 encode

        Raises:
        - ValueError if the bytes are not a readable image
        """

        # Step 1: Check the bytes really are an image
        try:
            with Image.open(io.BytesIO(file_bytes)) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, OSError) as error:
            raise ValueError("Uploaded file is not a supported image") from error

        # Step 2: MIME type from the detected format
        mime_type = Image.MIME.get(image_format or "", "image/jpeg")

        # Step 3: Base64 encode
        encoded = base64.b64encode(file_bytes).decode("utf-8")

        return f"data:{mime_type};base64,{encoded}"

    # ------------------------------------------------------------------
    # Model calls
    # ------------------------------------------------------------------

    def extract(self, image: str, prompt: str, max_tokens: Optional[int] = None) -> str:
        """
        Send one prompt plus the image to the vision model.

        Parameters:
        - image: data URL or bare base64 image
        - prompt: instruction text
        - max_tokens: maximum response length (defaults to self.max_tokens)

        Returns:
        - model response text, stripped

        Raises:
        - RuntimeError if the API call fails or returns no text
        """

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "text",
                                "text": prompt
                            },
                            {
                                "type": "image_url",
                                "image_url": {
                                    "url": self.to_data_url(image)
                                }
                            }
                        ]
                    }
                ],
                max_tokens=max_tokens or self.max_tokens
            )

            content = response.choices[0].message.content

        except Exception as e:
            logger.error(f"Vision API call failed: {str(e)}")
            raise RuntimeError(f"Vision API call failed: {str(e)}")

        if not content:
            raise RuntimeError("Vision API returned an empty response")

        return content.strip()

    def classify(self, image: str) -> DocumentCategory:
        """
        Decide whether the form is a fruit form or a mesh-bag form.

        The model answers "MALLAS" or "FRUTO_NORMAL"; anything that
        mentions "MALLA" is a mesh-bag form, everything else is the
        standard fruit form.

        Called by:
        - analyze() below
        """

        logger.info("Identifying document type...")

        answer = self.extract(image, CLASSIFICATION_PROMPT, max_tokens=self.classify_max_tokens)

        category = (
            DocumentCategory.MESH_FRUIT
            if "MALLA" in answer.upper()
            else DocumentCategory.FRUIT
        )

        logger.info(f"Document type answer {answer!r} -> {category.value}")

        return category

    def analyze(
        self,
        image: str,
        category: Optional[DocumentCategory] = None
    ) -> Tuple[DocumentCategory, str]:
        """
        Classify (unless a category is given) and extract a form.

        What happens here:
        1. Ask the model for the document type
        2. Pick the extraction prompt for that type
        3. Ask the model to read the form

        Parameters:
        - image: data URL or bare base64 image
        - category: skip classification when the caller already knows it

        Returns:
        - (category, raw model text)

        Called by:
        - API route in bascula/api/analyze.py
        """

        # Step 1: Document type
        if category is None:
            category = self.classify(image)

        # Step 2 + 3: Read the form with the matching prompt
        logger.info("Extracting form data...")
        raw_text = self.extract(image, extraction_prompt_for(category))

        logger.info(f"Extracted {len(raw_text)} characters")

        return category, raw_text
