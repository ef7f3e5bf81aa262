from dataclasses import replace

from PyQt5.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QListWidget,
                             QListWidgetItem, QTextEdit, QLineEdit, QLabel,
                             QPushButton, QSplitter, QFrame, QComboBox,
                             QMessageBox)
from PyQt5.QtCore import Qt

from exam_grader.error_messages import build_issue_report
from exam_grader.models import EditableExam, IssueLevel, ParseResult, QuestionType
from exam_grader.service import ExamProcessingService


TYPE_NAMES = {
    QuestionType.SINGLE: "객관식(단일)",
    QuestionType.MULTI: "객관식(복수)",
    QuestionType.SHORT: "주관식",
    QuestionType.OX: "O/X",
}


class PreviewWindow(QDialog):
    """Edit the editable form question by question; every save re-normalizes."""

    def __init__(self, service: ExamProcessingService, result: ParseResult, parent=None):
        super().__init__(parent)
        self.service = service
        self.editable = self._copy_editable(result.editable)
        self.result = result
        self.current_index = -1

        self.setWindowTitle("변환 결과 미리보기 및 보정")
        self.resize(1000, 720)
        self.initUI()
        self.bindEvents()
        self.loadQuestions()

    @staticmethod
    def _copy_editable(editable: EditableExam) -> EditableExam:
        return EditableExam(
            title=editable.title,
            questions=[replace(question) for question in editable.questions],
        )

    def initUI(self):
        main_layout = QVBoxLayout(self)

        header_label = QLabel("왼쪽 목록에서 문제를 선택하여 내용을 확인하고 수정할 수 있습니다.")
        header_label.setStyleSheet("font-weight: bold; color: #333; margin-bottom: 10px;")
        main_layout.addWidget(header_label)

        splitter = QSplitter(Qt.Horizontal)

        self.list_widget = QListWidget()
        self.list_widget.setObjectName("QuestionList")
        splitter.addWidget(self.list_widget)

        detail_container = QFrame()
        detail_layout = QVBoxLayout(detail_container)

        meta_layout = QHBoxLayout()
        meta_layout.addWidget(QLabel("번호:"))
        self.id_edit = QLineEdit()
        meta_layout.addWidget(self.id_edit)
        meta_layout.addWidget(QLabel("유형:"))
        self.type_combo = QComboBox()
        for question_type, name in TYPE_NAMES.items():
            self.type_combo.addItem(name, question_type)
        meta_layout.addWidget(self.type_combo)
        detail_layout.addLayout(meta_layout)

        detail_layout.addWidget(QLabel("문제:"))
        self.prompt_edit = QTextEdit()
        detail_layout.addWidget(self.prompt_edit)

        detail_layout.addWidget(QLabel("보기 (한 줄에 하나):"))
        self.choices_edit = QTextEdit()
        detail_layout.addWidget(self.choices_edit)

        detail_layout.addWidget(QLabel("정답 (예: ②, 1, 3 / 서울 | 서울특별시 / O):"))
        self.answer_edit = QLineEdit()
        detail_layout.addWidget(self.answer_edit)

        detail_layout.addWidget(QLabel("해설:"))
        self.explanation_edit = QTextEdit()
        self.explanation_edit.setMaximumHeight(90)
        detail_layout.addWidget(self.explanation_edit)

        self.issue_label = QLabel()
        self.issue_label.setObjectName("IssueReport")
        self.issue_label.setWordWrap(True)
        detail_layout.addWidget(self.issue_label)

        splitter.addWidget(detail_container)
        splitter.setStretchFactor(1, 1)
        main_layout.addWidget(splitter)

        btn_layout = QHBoxLayout()
        self.save_btn = QPushButton("변경사항 저장")
        self.apply_btn = QPushButton("적용 후 닫기")
        self.apply_btn.setObjectName("PrimaryBtn")
        self.close_btn = QPushButton("닫기")

        btn_layout.addStretch()
        btn_layout.addWidget(self.save_btn)
        btn_layout.addWidget(self.apply_btn)
        btn_layout.addWidget(self.close_btn)
        main_layout.addLayout(btn_layout)

    def bindEvents(self):
        self.list_widget.currentRowChanged.connect(self.onQuestionSelected)
        self.save_btn.clicked.connect(self.saveCurrentQuestion)
        self.apply_btn.clicked.connect(self.applyAndClose)
        self.close_btn.clicked.connect(self.reject)

    def loadQuestions(self):
        flagged = {
            issue.question_id
            for issue in self.result.issues
            if issue.level is IssueLevel.WARN and issue.question_id
        }
        self.list_widget.clear()
        for question in self.editable.questions:
            status = "⚠️" if question.id in flagged else "✅"
            preview_line = question.prompt.splitlines()[0] if question.prompt else "(본문 없음)"
            item_text = f"{status} {question.id}. {preview_line}"
            self.list_widget.addItem(QListWidgetItem(item_text))

        self.issue_label.setText(build_issue_report(self.result.issues))
        if self.editable.questions:
            self.list_widget.setCurrentRow(max(self.current_index, 0))

    def onQuestionSelected(self, index: int):
        self.current_index = index
        if index < 0 or index >= len(self.editable.questions):
            self.id_edit.clear()
            self.prompt_edit.clear()
            self.choices_edit.clear()
            self.answer_edit.clear()
            self.explanation_edit.clear()
            return

        question = self.editable.questions[index]
        self.id_edit.setText(question.id)
        self.type_combo.setCurrentIndex(self.type_combo.findData(question.type))
        self.prompt_edit.setPlainText(question.prompt)
        self.choices_edit.setPlainText(question.choices_text)
        self.answer_edit.setText(question.answer_text)
        self.explanation_edit.setPlainText(question.explanation)

    def saveCurrentQuestion(self, show_message: bool = True) -> bool:
        index = self.current_index
        if index < 0 or index >= len(self.editable.questions):
            return False

        question = self.editable.questions[index]
        question.id = self.id_edit.text().strip()
        question.type = self.type_combo.currentData()
        question.prompt = self.prompt_edit.toPlainText()
        question.choices_text = self.choices_edit.toPlainText()
        question.answer_text = self.answer_edit.text()
        question.explanation = self.explanation_edit.toPlainText()

        self.result = self.service.apply_edits(self.editable)
        self.loadQuestions()
        if show_message:
            QMessageBox.information(self, "저장 완료", "현재 문항 변경사항을 반영했습니다.")
        return True

    def applyAndClose(self):
        if self.saveCurrentQuestion(show_message=False):
            self.accept()
