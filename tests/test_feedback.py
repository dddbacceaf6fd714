from bascula.services.feedback import TrainingFeedbackService


def test_record_marks_corrected_classification():
    service = TrainingFeedbackService()

    entry = service.record(
        ai_detected_type="FRUIT",
        user_corrected_type="MESH_FRUIT",
        extracted_data={"peso_bascula": 13940},
        is_correct=False,
        image_data="data:image/jpeg;base64,AAAA"
    )

    assert entry["correction_needed"] is True
    assert entry["image_size"] == len("data:image/jpeg;base64,AAAA")


def test_record_without_user_type_needs_no_correction():
    entry = TrainingFeedbackService().record(ai_detected_type="FRUIT", user_corrected_type=None)
    assert entry["correction_needed"] is False
    assert entry["image_size"] == 0


def test_stats_on_empty_log():
    assert TrainingFeedbackService().stats() == {
        "total_analyses": 0,
        "accuracy_rate": 0.0,
        "common_errors": [],
        "improvement_suggestions": [],
    }


def test_stats_summarise_feedback():
    service = TrainingFeedbackService()
    service.record(ai_detected_type="FRUIT", user_corrected_type="MESH_FRUIT", is_correct=False)
    service.record(ai_detected_type="FRUIT", user_corrected_type="MESH_FRUIT", is_correct=True)
    service.record(ai_detected_type="MESH_FRUIT", user_corrected_type="FRUIT", is_correct=True)
    service.record(ai_detected_type="FRUIT", user_corrected_type="FRUIT", is_correct=True)
    service.record(ai_detected_type="FRUIT", user_corrected_type="FRUIT")

    stats = service.stats()

    assert stats["total_analyses"] == 5
    assert stats["accuracy_rate"] == 0.75
    assert stats["common_errors"][0] == {"detected": "FRUIT", "corrected": "MESH_FRUIT", "count": 2}
    assert len(stats["common_errors"]) == 2
    assert len(stats["improvement_suggestions"]) == 1


def test_clear():
    service = TrainingFeedbackService()
    service.record(ai_detected_type="FRUIT", user_corrected_type="FRUIT")
    service.clear()
    assert service.stats()["total_analyses"] == 0
