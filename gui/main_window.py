import json
import os
from pathlib import Path
from PyQt5.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
                              QLabel, QPushButton, QFileDialog, QTextEdit,
                              QFrame, QAction, QMessageBox)
from PyQt5.QtCore import Qt, pyqtSignal

from exam_grader.config_manager import ConfigManager
from exam_grader.error_messages import build_issue_report, build_parse_error_message
from exam_grader.exceptions import ProcessingError
from exam_grader.models import ParseResult
from exam_grader.service import ExamProcessingService

from .preview_window import PreviewWindow
from .styles import APP_STYLE, DROP_HOVER_STYLE


class DropArea(QFrame):
    fileDropped = pyqtSignal(str)

    def __init__(self):
        super().__init__()
        self.setAcceptDrops(True)
        self.setFrameStyle(QFrame.StyledPanel | QFrame.Sunken)
        self.setObjectName("DropArea")

        layout = QVBoxLayout()
        self.label = QLabel("여기에 시험 파일(.json / .txt)을 끌어다 놓으세요\n또는 클릭하여 파일 선택")
        self.label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.label)
        self.setLayout(layout)

        self.setMinimumHeight(180)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.accept()
            self.setStyleSheet(DROP_HOVER_STYLE)
        else:
            event.ignore()

    def dragLeaveEvent(self, event):
        self.setStyleSheet("")

    def dropEvent(self, event):
        self.setStyleSheet("")
        files = [u.toLocalFile() for u in event.mimeData().urls()]
        if files:
            self.fileDropped.emit(files[0])

    def mousePressEvent(self, event):
        self.fileDropped.emit("SELECT_FILE")


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("시험지 변환기")
        self.resize(680, 620)

        self.config_manager = ConfigManager()
        self.service = ExamProcessingService(self.config_manager)
        self.selected_file = ""
        self.current_result: ParseResult | None = None

        self.initUI()
        self.applyStyle()

    def initUI(self):
        menu_bar = self.menuBar()
        help_action = QAction("안내", self)
        help_action.triggered.connect(self.showHelp)
        menu_bar.addAction(help_action)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)
        main_layout.setContentsMargins(30, 30, 30, 30)
        main_layout.setSpacing(16)

        title_label = QLabel("시험지 변환기")
        title_label.setObjectName("MainTitle")
        main_layout.addWidget(title_label)

        subtitle_label = QLabel("JSON 또는 일반 텍스트 문제를 채점 가능한 시험지로 변환합니다.")
        subtitle_label.setObjectName("SubTitle")
        main_layout.addWidget(subtitle_label)

        self.drop_area = DropArea()
        self.drop_area.fileDropped.connect(self.handleFileSelect)
        main_layout.addWidget(self.drop_area)

        self.status_label = QLabel("분석 결과: 대기 중")
        main_layout.addWidget(self.status_label)

        self.issue_view = QTextEdit()
        self.issue_view.setObjectName("IssueReport")
        self.issue_view.setReadOnly(True)
        main_layout.addWidget(self.issue_view)

        btn_layout = QHBoxLayout()
        self.preview_btn = QPushButton("미리보기 / 수정")
        self.preview_btn.setEnabled(False)
        self.preview_btn.clicked.connect(self.showPreview)
        self.export_btn = QPushButton("JSON으로 저장")
        self.export_btn.setObjectName("PrimaryBtn")
        self.export_btn.setEnabled(False)
        self.export_btn.clicked.connect(self.exportJson)

        btn_layout.addWidget(self.preview_btn)
        btn_layout.addWidget(self.export_btn)
        main_layout.addLayout(btn_layout)

    def handleFileSelect(self, file_path):
        if file_path == "SELECT_FILE":
            file_path, _ = QFileDialog.getOpenFileName(
                self,
                "시험 파일 선택",
                "",
                "Exam Files (*.json *.txt *.md);;All Files (*)",
            )

        if file_path and os.path.isfile(file_path):
            self.selected_file = file_path
            self.parseSelectedFile()

    def parseSelectedFile(self):
        try:
            result = self.service.parse_file(self.selected_file)
        except ProcessingError as exc:
            self._showResult(None)
            self.status_label.setText("분석 실패")
            QMessageBox.warning(self, "분석 실패", build_parse_error_message(str(exc)))
            return
        self._showResult(result)

    def _showResult(self, result: ParseResult | None):
        self.current_result = result
        has_exam = bool(result and result.exam)
        self.preview_btn.setEnabled(has_exam)
        self.export_btn.setEnabled(has_exam)
        if result is None:
            self.issue_view.clear()
            return

        self.issue_view.setPlainText(build_issue_report(result.issues))
        if result.exam is None:
            self.status_label.setText(f"분석 실패: {os.path.basename(self.selected_file)}")
            return
        self.status_label.setText(
            f"분석 완료: {os.path.basename(self.selected_file)} | "
            f"{result.exam.title} | {len(result.exam.questions)}문항"
        )

    def showPreview(self):
        if not self.current_result or not self.current_result.editable:
            QMessageBox.information(self, "안내", "먼저 파일을 선택해 분석을 완료해주세요.")
            return

        preview = PreviewWindow(self.service, self.current_result, self)
        if preview.exec_():
            self._showResult(preview.result)

    def exportJson(self):
        if not self.current_result or not self.current_result.exam:
            return
        default_name = str(Path(self.selected_file).with_suffix(".exam.json"))
        file_path, _ = QFileDialog.getSaveFileName(self, "JSON 저장", default_name, "JSON Files (*.json)")
        if not file_path:
            return
        try:
            with open(file_path, "w", encoding="utf-8") as file:
                json.dump(self.current_result.exam.to_dict(), file, ensure_ascii=False, indent=2)
        except OSError as exc:
            QMessageBox.warning(self, "저장 실패", f"파일을 저장하지 못했습니다.\n{exc}")
            return
        QMessageBox.information(self, "저장 완료", f"저장했습니다:\n{file_path}")

    def showHelp(self):
        QMessageBox.information(
            self,
            "안내",
            "1) JSON 또는 텍스트 시험 파일을 선택합니다.\n"
            "2) 경고가 있는 문항은 미리보기에서 확인/수정합니다.\n"
            "3) JSON으로 저장해 채점 화면에서 사용합니다.\n\n"
            "텍스트 형식: '문제 1) ...', 보기 '① ...', '정답: ②', '해설: ...'",
        )

    def applyStyle(self):
        self.setStyleSheet(APP_STYLE)
